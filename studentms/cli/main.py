"""studentms CLI entry point."""

from __future__ import annotations

import click

from studentms.cli.commands.students import students_cmd
from studentms.cli.commands.users import users_cmd
from studentms.cli.output import console


@click.group()
@click.version_option(package_name="studentms")
@click.option(
    "--api-url",
    default="http://localhost:8000",
    envvar="STUDENTMS_API_URL",
    show_default=True,
    help="Base URL of the studentms API server",
)
@click.option(
    "--token",
    default=None,
    envvar="STUDENTMS_TOKEN",
    help="Access token sent as a Bearer credential",
)
@click.pass_context
def cli(ctx: click.Context, api_url: str, token: str | None) -> None:
    """studentms: student management backend.

    \b
    Quick start:
      studentms migrate
      studentms serve --reload
      studentms health
      studentms --token $TOKEN students list --class-name 10-A
      studentms --token $TOKEN users list

    API docs: http://localhost:8000/docs
    """
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url.rstrip("/")
    ctx.obj["token"] = token


cli.add_command(students_cmd)
cli.add_command(users_cmd)


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True, help="Bind host")
@click.option("--port", default=8000, show_default=True, help="Bind port")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload (dev mode)")
def serve(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "studentms.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@cli.command("migrate")
@click.option(
    "--config",
    "config_path",
    default="alembic.ini",
    show_default=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Alembic configuration file",
)
@click.option("--revision", default="head", show_default=True, help="Target revision")
@click.option("--database-url", default=None, help="Override DATABASE_URL for this run")
def migrate(config_path: str, revision: str, database_url: str | None) -> None:
    """Apply database migrations (alembic upgrade)."""
    from alembic import command
    from alembic.config import Config

    cfg = Config(config_path)
    if database_url:
        # ConfigParser interpolation: a literal % must be doubled
        cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    command.upgrade(cfg, revision)
    console.print(f"[green]Database upgraded to[/green] {revision}")


@cli.command("health")
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check that the API server is reachable."""
    import httpx

    api_url: str = ctx.obj["api_url"]
    try:
        r = httpx.get(f"{api_url}/health", timeout=5)
        r.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]API at {api_url} is not healthy:[/red] {e}")
        raise SystemExit(1)
    data = r.json()
    console.print(f"[green]ok[/green] version {data.get('version', '?')}")


if __name__ == "__main__":
    cli()
