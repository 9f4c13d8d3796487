"""Flask CLI commands for scheduled and maintenance jobs.

Run with ``flask --app attendance_ledger.main <command>``. ``reset-day``
is meant to be scheduled by cron shortly after midnight.
"""

from __future__ import annotations

import click
from flask import Flask, current_app

from .attendance.model import AttendanceError
from .container import Container
from .database.bootstrap import apply_schema, list_tables


def register(app: Flask, container: Container) -> None:
    ledger = container.attendance_service

    @app.cli.command("init-db")
    def init_db():
        """Apply database/schema.sql to the configured database."""
        db_config = current_app.config["DB_CONFIG"]
        apply_schema(db_config)
        click.echo(f"OK: schema applied (tables={len(list_tables(db_config))})")

    @app.cli.command("reset-day")
    def reset_day():
        """Finalize every open attendance record."""
        summary = ledger.reset_attendance_for_new_day()
        click.echo(f"Finalized {len(summary.finalized)} record(s)")
        for employee_id, error in summary.failures:
            click.echo(f"FAILED {employee_id}: {error.code.value} {error.message}", err=True)
        if summary.failures:
            raise SystemExit(1)

    @app.cli.command("finalize")
    @click.argument("employee_id")
    def finalize(employee_id: str):
        """Close today's open session for one employee."""
        result = ledger.finalize_day_attendance(employee_id)
        if isinstance(result, AttendanceError):
            raise click.ClickException(f"{result.code.value}: {result.message}")
        if result is None:
            click.echo("No attendance record today")
            return
        click.echo(f"{result.employee_id} {result.work_date} total={result.total_hours_worked}")
