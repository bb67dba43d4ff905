"""File adapters - CSV import/export and directory backups."""

from campusrecords.files.backups import BackupError, BackupInfo, BackupManager, directory_size
from campusrecords.files.csv_files import (
    EnrollmentRow,
    GradeRow,
    ImportReport,
    export_all,
    export_courses,
    export_enrollments,
    export_grades,
    export_students,
    import_all,
    read_courses,
    read_enrollments,
    read_grades,
    read_students,
)

__all__ = [
    "BackupError",
    "BackupInfo",
    "BackupManager",
    "EnrollmentRow",
    "GradeRow",
    "ImportReport",
    "directory_size",
    "export_all",
    "export_courses",
    "export_enrollments",
    "export_grades",
    "export_students",
    "import_all",
    "read_courses",
    "read_enrollments",
    "read_grades",
    "read_students",
]
