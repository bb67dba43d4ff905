"""Campus Records - academic records manager for students, courses, enrollments and grades."""

from campusrecords.config import RecordsConfig, load_config
from campusrecords.registry import CampusRecords

__version__ = "1.0.0"

__all__ = [
    "CampusRecords",
    "RecordsConfig",
    "__version__",
    "load_config",
]
