"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from campusrecords.config import RecordsConfig
from campusrecords.registry import CampusRecords

# Global CampusRecords instance (initialized on app startup)
_records: CampusRecords | None = None


def init_records(config: RecordsConfig | None = None) -> CampusRecords:
    """Initialize the global CampusRecords instance."""
    global _records  # noqa: PLW0603
    _records = CampusRecords(config)
    return _records


def set_records(records: CampusRecords) -> None:
    """Install an already-populated CampusRecords instance."""
    global _records  # noqa: PLW0603
    _records = records


def close_records() -> None:
    """Close the global CampusRecords instance."""
    global _records  # noqa: PLW0603
    if _records is not None:
        _records.close()
        _records = None


def get_records() -> Generator[CampusRecords, None, None]:
    """Dependency that provides the CampusRecords instance."""
    if _records is None:
        raise RuntimeError("CampusRecords not initialized. Call init_records() first.")
    yield _records


# Type alias for dependency injection
RecordsDep = Annotated[CampusRecords, Depends(get_records)]
