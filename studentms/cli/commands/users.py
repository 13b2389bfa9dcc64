"""CLI commands for user accounts (admin token required)."""

from __future__ import annotations

import click

from studentms.cli.commands._http import api_get
from studentms.cli.output import console, users_table


@click.group("users")
def users_cmd() -> None:
    """Inspect login accounts."""


@users_cmd.command("list")
@click.option("--role", type=click.Choice(["admin", "teacher", "student"]), default=None)
@click.pass_context
def users_list(ctx: click.Context, role: str | None) -> None:
    """List all accounts, optionally filtered by role."""
    data = api_get(ctx, "/api/v1/users")
    items = data["items"]
    if role:
        items = [u for u in items if u.get("role") == role]
    console.print(users_table(items))


@users_cmd.command("me")
@click.pass_context
def users_me(ctx: click.Context) -> None:
    """Show the account the token belongs to."""
    u = api_get(ctx, "/api/v1/users/current-user")
    console.print(f"[bold]{u['username']}[/bold] <{u['email']}> role={u['role']}")
