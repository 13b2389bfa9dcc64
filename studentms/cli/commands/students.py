"""CLI commands for student records."""

from __future__ import annotations

import click

from studentms.cli.commands._http import api_get
from studentms.cli.output import console, students_table


@click.group("students")
def students_cmd() -> None:
    """Browse student records."""


@students_cmd.command("list")
@click.option("--limit", default=50, show_default=True, help="Max rows to display")
@click.option("--class-name", default=None, help="Only students in this class")
@click.option("--active-only", is_flag=True, default=False, help="Hide inactive students")
@click.pass_context
def students_list(ctx: click.Context, limit: int, class_name: str | None, active_only: bool) -> None:
    """List students ordered by roll number."""
    params: dict[str, str | int] = {"limit": limit}
    if class_name:
        params["class_name"] = class_name
    if active_only:
        params["is_active"] = "true"

    data = api_get(ctx, "/api/v1/students", params)
    console.print(students_table(data["items"]))
    console.print(f"[dim]Showing {len(data['items'])} of {data['total']} students.[/dim]")
