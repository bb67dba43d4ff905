"""Timestamped directory backups of the CSV export."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from campusrecords.files.csv_files import (
    COURSES_FILE,
    ENROLLMENTS_FILE,
    GRADES_FILE,
    STUDENTS_FILE,
    ImportReport,
    export_all,
    import_all,
)

if TYPE_CHECKING:
    from campusrecords.config import RecordsConfig
    from campusrecords.registry import CampusRecords

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup_"
MANIFEST_FILE = "backup_manifest.txt"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"


class BackupError(Exception):
    """Raised when a backup is missing, malformed or cannot be written."""


@dataclass(frozen=True)
class BackupInfo:
    """Name, creation time and on-disk size of one backup."""

    name: str
    created: datetime
    size: int

    def __str__(self) -> str:
        return f"{self.name} (created {self.created:%Y-%m-%d %H:%M}, {self.size} bytes)"


def directory_size(path: Path | str) -> int:
    """Total bytes of all files under path; 0 if it doesn't exist."""
    path = Path(path)
    if not path.exists():
        return 0
    if path.is_file():
        return path.stat().st_size
    return sum(p.stat().st_size for p in path.rglob("*") if p.is_file())


class BackupManager:
    """Creates, lists, prunes and restores backups under the configured directory.

    A backup is a directory named backup_<timestamp> holding the four CSV
    files and a manifest. Names sort in creation order.
    """

    def __init__(self, config: RecordsConfig) -> None:
        self._config = config
        self.backup_dir = config.get_backup_path()

    def create_backup(self, records: CampusRecords) -> Path:
        """Export records into a new timestamped backup directory.

        A directory left incomplete by a failed export is removed.

        Returns:
            Path of the backup directory

        Raises:
            BackupError: If the directory cannot be written
        """
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self._new_backup_path()
        except OSError as e:
            raise BackupError(f"Failed to create backup: {e}") from e

        try:
            export_all(records, path)
            self._write_manifest(path)
        except Exception as e:
            logger.warning("Backup %s failed, removing partial directory", path.name)
            shutil.rmtree(path, ignore_errors=True)
            if isinstance(e, OSError):
                raise BackupError(f"Failed to create backup: {e}") from e
            raise
        logger.info("Created backup %s", path.name)
        return path

    def _new_backup_path(self) -> Path:
        while True:
            name = BACKUP_PREFIX + datetime.now().strftime(TIMESTAMP_FORMAT)
            path = self.backup_dir / name
            try:
                path.mkdir()
            except FileExistsError:
                continue
            return path

    def _write_manifest(self, path: Path) -> None:
        lines = [
            f"{self._config.name} Backup Manifest",
            f"Created: {datetime.now():%Y-%m-%d %H:%M:%S}",
            f"Version: {self._config.version}",
            "Files:",
            *(f"- {name}" for name in (STUDENTS_FILE, COURSES_FILE, ENROLLMENTS_FILE, GRADES_FILE)),
        ]
        (path / MANIFEST_FILE).write_text("\n".join(lines) + "\n", encoding="utf-8")

    def list_backups(self) -> list[str]:
        """Backup names, oldest first."""
        if not self.backup_dir.exists():
            return []
        return sorted(
            p.name
            for p in self.backup_dir.iterdir()
            if p.is_dir() and p.name.startswith(BACKUP_PREFIX)
        )

    def _path(self, name: str) -> Path:
        if not name.startswith(BACKUP_PREFIX) or "/" in name or "\\" in name:
            raise BackupError(f"Invalid backup name: {name}")
        path = self.backup_dir / name
        if not path.is_dir():
            raise BackupError(f"Backup not found: {name}")
        return path

    def backup_info(self, name: str) -> BackupInfo:
        """Describe one backup.

        Raises:
            BackupError: If the backup doesn't exist or its name has no timestamp
        """
        path = self._path(name)
        try:
            created = datetime.strptime(name.removeprefix(BACKUP_PREFIX), TIMESTAMP_FORMAT)
        except ValueError as e:
            raise BackupError(f"Backup name has no valid timestamp: {name}") from e
        return BackupInfo(name=name, created=created, size=directory_size(path))

    def clean_old(self, keep: int | None = None) -> int:
        """Delete the oldest backups beyond the newest keep.

        Args:
            keep: How many to keep. Defaults to backup_retention_count.

        Returns:
            Number of backups deleted
        """
        if keep is None:
            keep = self._config.backup_retention_count
        if keep < 0:
            raise BackupError(f"keep must not be negative: {keep}")

        backups = self.list_backups()
        deleted = 0
        for name in backups[: max(0, len(backups) - keep)]:
            try:
                shutil.rmtree(self.backup_dir / name)
            except OSError as e:
                logger.warning("Failed to delete backup %s: %s", name, e)
                continue
            deleted += 1
            logger.info("Deleted old backup %s", name)
        return deleted

    def verify(self, name: str) -> Path:
        """Check the backup directory and its manifest exist.

        Raises:
            BackupError: If either is missing
        """
        path = self._path(name)
        if not (path / MANIFEST_FILE).is_file():
            raise BackupError(f"Invalid backup: missing manifest file in {name}")
        return path

    def restore(self, name: str, records: CampusRecords) -> ImportReport:
        """Verify a backup, then import it into records (normally empty).

        Raises:
            BackupError: If verification fails
        """
        path = self.verify(name)
        report = import_all(records, path)
        logger.info("Restored backup %s (%d rows, %d errors)", name, report.total, len(report.errors))
        return report
