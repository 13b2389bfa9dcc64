"""Shared HTTP call for CLI commands."""

from __future__ import annotations

from typing import Any

import click
import httpx

from studentms.cli.output import console


def api_get(ctx: click.Context, path: str, params: dict[str, Any] | None = None) -> Any:
    """GET *path* from the API and return the decoded JSON, exiting 1 on failure."""
    api_url: str = ctx.obj["api_url"]
    headers = {}
    if ctx.obj.get("token"):
        headers["Authorization"] = f"Bearer {ctx.obj['token']}"
    try:
        r = httpx.get(f"{api_url}{path}", params=params, headers=headers, timeout=15)
        r.raise_for_status()
        return r.json()
    except httpx.ConnectError:
        console.print(f"[red]Cannot connect to API at {api_url}.[/red]")
        raise SystemExit(1)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 401:
            console.print("[yellow]Not authenticated, pass --token or set STUDENTMS_TOKEN.[/yellow]")
        else:
            console.print(f"[red]Error {e.response.status_code}:[/red] {e.response.text}")
        raise SystemExit(1)
