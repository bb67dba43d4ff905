"""CLI entry point for Campus Records.

Commands that need data load it from the CSV data directory into a fresh
in-memory record set; commands that change data write it back there.
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn

import click

from campusrecords.config import ConfigError, RecordsConfig, find_config, load_config
from campusrecords.files.backups import BackupError, BackupManager
from campusrecords.files.csv_files import export_all, import_all
from campusrecords.logging import setup_logging
from campusrecords.registry import CampusRecords
from campusrecords.store.exceptions import RecordsError

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to campusrecords.yaml (auto-detected if not specified)",
)
data_dir_option = click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="CSV data directory (default: from config)",
)
verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)


def _load_config(config_path: Path | None) -> RecordsConfig:
    """Load the given config, the nearest campusrecords.yaml, or defaults."""
    if config_path is not None:
        return load_config(config_path)
    try:
        config_path = find_config()
    except ConfigError:
        return RecordsConfig(root_path=Path.cwd())
    return load_config(config_path)


def _setup(config_path: Path | None, verbose: bool) -> RecordsConfig:
    config = _load_config(config_path)
    setup_logging(config, verbose=verbose)
    return config


def _load_records(config: RecordsConfig, data_dir: Path | None) -> CampusRecords:
    """Fresh records populated from the data directory, if it exists."""
    records = CampusRecords(config)
    source = data_dir if data_dir is not None else config.get_data_path()
    if source.is_dir():
        report = import_all(records, source)
        if report.errors:
            click.echo(
                f"Warning: {len(report.errors)} rows could not be loaded from {source}", err=True
            )
            for error in report.errors:
                click.echo(f"  - {error}", err=True)
    return records


def _fail(prefix: str, error: Exception) -> NoReturn:
    click.echo(f"{prefix}: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="campusrecords")
def main() -> None:
    """Campus Records - students, courses, enrollments, grades and transcripts."""
    pass


@main.command()
@config_option
@data_dir_option
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@verbose_option
def serve(
    config_path: Path | None, data_dir: Path | None, host: str, port: int, verbose: bool
) -> None:
    """Serve the REST API."""
    import uvicorn  # noqa: PLC0415

    from campusrecords.api.app import create_app  # noqa: PLC0415

    try:
        config = _setup(config_path, verbose)
        records = _load_records(config, data_dir)
    except ConfigError as e:
        _fail("Configuration error", e)

    click.echo(f"Serving {config.name} v{config.version} on http://{host}:{port}")
    uvicorn.run(create_app(config=config, records=records), host=host, port=port)


@main.command()
@click.argument("student_id")
@config_option
@data_dir_option
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to this file instead of stdout",
)
@verbose_option
def transcript(
    student_id: str,
    config_path: Path | None,
    data_dir: Path | None,
    output: Path | None,
    verbose: bool,
) -> None:
    """Print or export a student's transcript."""
    try:
        config = _setup(config_path, verbose)
        records = _load_records(config, data_dir)
        if output is None:
            click.echo(records.transcripts.render(student_id), nl=False)
        else:
            path = records.transcripts.export(student_id, output)
            click.echo(f"Transcript written to: {path}")
    except ConfigError as e:
        _fail("Configuration error", e)
    except RecordsError as e:
        _fail("Error", e)


@main.command()
@config_option
@data_dir_option
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to export into (default: <export_dir>/export_<timestamp>)",
)
@verbose_option
def export(
    config_path: Path | None, data_dir: Path | None, output: Path | None, verbose: bool
) -> None:
    """Export all records to CSV files."""
    try:
        config = _setup(config_path, verbose)
        records = _load_records(config, data_dir)
        if output is None:
            output = config.get_export_path() / f"export_{datetime.now():%Y-%m-%d_%H-%M-%S}"
        paths = export_all(records, output)
    except ConfigError as e:
        _fail("Configuration error", e)
    except OSError as e:
        _fail("Export failed", e)

    click.echo(f"Exported {len(paths)} files to: {output}")


@main.command()
@config_option
@data_dir_option
@verbose_option
def stats(config_path: Path | None, data_dir: Path | None, verbose: bool) -> None:
    """Show record statistics."""
    try:
        config = _setup(config_path, verbose)
        records = _load_records(config, data_dir)
    except ConfigError as e:
        _fail("Configuration error", e)

    click.echo("Students:")
    for status, count in records.students.statistics().items():
        click.echo(f"  {status.name:<10} {count}")

    click.echo("\nCourses by department:")
    departments = records.courses.department_statistics()
    if not departments:
        click.echo("  (none)")
    for dept in departments.values():
        click.echo(
            f"  {dept.department}: {dept.total_courses} courses "
            f"({dept.active_courses} active), {dept.total_credits} credits, "
            f"avg {dept.average_credits:.1f}"
        )

    enrollment_stats = records.enrollments.statistics()
    click.echo(f"\nEnrollments: {enrollment_stats.total}")
    for status, count in enrollment_stats.by_status.items():
        click.echo(f"  {status.name:<10} {count}")

    grade_stats = records.grades.statistics()
    click.echo(f"\nGrades: {grade_stats.total}")
    if grade_stats.total:
        click.echo(f"  Average marks: {grade_stats.average_marks:.2f}")
        click.echo(f"  Pass rate: {grade_stats.pass_rate:.1f}%")
        for letter, count in grade_stats.distribution.items():
            click.echo(f"  {letter.value}: {count}")


@main.group()
def backup() -> None:
    """Create, inspect and prune backups."""
    pass


@backup.command("create")
@config_option
@data_dir_option
@verbose_option
def backup_create(config_path: Path | None, data_dir: Path | None, verbose: bool) -> None:
    """Back up the current data."""
    try:
        config = _setup(config_path, verbose)
        records = _load_records(config, data_dir)
        manager = BackupManager(config)
        path = manager.create_backup(records)
        removed = manager.clean_old()
    except ConfigError as e:
        _fail("Configuration error", e)
    except BackupError as e:
        _fail("Backup error", e)

    click.echo(f"Backup created: {path}")
    if removed:
        click.echo(f"Removed {removed} old backup(s)")


@backup.command("list")
@config_option
@verbose_option
def backup_list(config_path: Path | None, verbose: bool) -> None:
    """List backups, oldest first."""
    try:
        config = _setup(config_path, verbose)
    except ConfigError as e:
        _fail("Configuration error", e)

    names = BackupManager(config).list_backups()
    if not names:
        click.echo("No backups found")
        return
    for name in names:
        click.echo(name)


@backup.command("info")
@click.argument("name")
@config_option
@verbose_option
def backup_info(name: str, config_path: Path | None, verbose: bool) -> None:
    """Show a backup's creation time and size."""
    try:
        config = _setup(config_path, verbose)
        info = BackupManager(config).backup_info(name)
    except ConfigError as e:
        _fail("Configuration error", e)
    except BackupError as e:
        _fail("Backup error", e)

    click.echo(f"Name: {info.name}")
    click.echo(f"Created: {info.created:%Y-%m-%d %H:%M:%S}")
    click.echo(f"Size: {info.size} bytes")


@backup.command("clean")
@click.option("--keep", type=click.IntRange(min=0), default=None, help="How many to keep")
@config_option
@verbose_option
def backup_clean(keep: int | None, config_path: Path | None, verbose: bool) -> None:
    """Delete the oldest backups beyond the retention count."""
    try:
        config = _setup(config_path, verbose)
        removed = BackupManager(config).clean_old(keep)
    except ConfigError as e:
        _fail("Configuration error", e)
    except BackupError as e:
        _fail("Backup error", e)

    click.echo(f"Removed {removed} old backup(s)")


@backup.command("verify")
@click.argument("name")
@config_option
@verbose_option
def backup_verify(name: str, config_path: Path | None, verbose: bool) -> None:
    """Check a backup is complete."""
    try:
        config = _setup(config_path, verbose)
        BackupManager(config).verify(name)
    except ConfigError as e:
        _fail("Configuration error", e)
    except BackupError as e:
        _fail("Backup error", e)

    click.echo(f"Backup is valid: {name}")


@backup.command("restore")
@click.argument("name")
@config_option
@data_dir_option
@verbose_option
def backup_restore(
    name: str, config_path: Path | None, data_dir: Path | None, verbose: bool
) -> None:
    """Replace the data directory with the contents of a backup."""
    try:
        config = _setup(config_path, verbose)
        records = CampusRecords(config)
        report = BackupManager(config).restore(name, records)
        target = data_dir if data_dir is not None else config.get_data_path()
        export_all(records, target)
    except ConfigError as e:
        _fail("Configuration error", e)
    except BackupError as e:
        _fail("Backup error", e)

    click.echo(f"Restored {report.total} records from {name} into {target}")
    for error in report.errors:
        click.echo(f"  - {error}", err=True)


if __name__ == "__main__":
    main()
