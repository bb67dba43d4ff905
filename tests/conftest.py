"""Shared pytest fixtures and configuration."""

import logging

import pytest

from campusrecords.config import RecordsConfig
from campusrecords.logging import ROOT_LOGGER
from campusrecords.registry import CampusRecords
from campusrecords.store.models import Semester, new_course, new_student


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers and level that setup_logging put on the package logger."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config() -> RecordsConfig:
    """Default configuration (18-credit limit, in-memory database)."""
    return RecordsConfig()


@pytest.fixture
def records(config: RecordsConfig):
    """Empty in-memory records."""
    r = CampusRecords(config)
    yield r
    r.close()


@pytest.fixture
def populated(records: CampusRecords) -> CampusRecords:
    """Records with two active students and three courses.

    S1 and S2 are ACTIVE; C1 and C2 are 3-credit courses and C3 carries the
    6-credit maximum.
    """
    records.students.add(new_student("S1", "R1", "Ada Lovelace", "ada@example.com"))
    records.students.add(new_student("S2", "R2", "Brian Kernighan", "bwk@example.com"))
    records.courses.add(new_course("C1", "Intro to CS", 3, "Computer Science", Semester.FALL))
    records.courses.add(new_course("C2", "Data Structures", 3, "Computer Science", Semester.SPRING))
    records.courses.add(new_course("C3", "Linear Algebra", 6, "Mathematics", Semester.FALL))
    return records
