"""Rich output helpers for the CLI."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console()


def fmt_date(iso: str | None) -> str:
    if not iso:
        return "-"
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
        return dt.strftime("%Y-%m-%d")
    except ValueError:
        return iso


def _flag(value: Any) -> Text:
    return Text("✓", style="green") if value else Text("✗", style="dim")


def students_table(items: list[dict[str, Any]]) -> Table:
    table = Table(
        title=f"Students ({len(items)})",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Roll no.", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Class")
    table.add_column("Email", style="dim")
    table.add_column("Active", justify="center")
    table.add_column("Enrolled", style="dim")

    for s in items:
        table.add_row(
            s.get("roll_number") or "-",
            s.get("full_name") or "-",
            s.get("class_name") or "-",
            s.get("email") or "-",
            _flag(s.get("is_active")),
            fmt_date(s.get("enrollment_date")),
        )
    return table


def users_table(items: list[dict[str, Any]]) -> Table:
    table = Table(
        title=f"Users ({len(items)})",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Username", style="bold", no_wrap=True)
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Provider", style="dim")
    table.add_column("Verified", justify="center")
    table.add_column("Active", justify="center")

    for u in items:
        table.add_row(
            u.get("username") or "-",
            u.get("email") or "-",
            u.get("role") or "-",
            u.get("auth_provider") or "-",
            _flag(u.get("is_verified")),
            _flag(u.get("is_active")),
        )
    return table
