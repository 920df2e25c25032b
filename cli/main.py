"""Agrihub CLI: entry-point for serving and operating the backend.

Usage:
    python cli/main.py --help

Command groups:
    serve     run the HTTP API
    scans     print one page of a farm's scan history
    token     sign a bearer token for local testing
    cache     warm / invalidate / inspect cached scan pages
    image     resolve and fetch image references
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from agrihub.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import typer

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore
from agrihub.config import settings
from agrihub.db.connection import GraphStore
from agrihub.errors import AgrihubError
from agrihub.services.farm import get_farm_scans

from cli.commands.cache import cache_app
from cli.commands.image import image_app

app = typer.Typer(
    name="agrihub",
    help="Agrihub backend CLI.",
    no_args_is_help=True,
)

app.add_typer(cache_app, name="cache")
app.add_typer(image_app, name="image")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address."),
    port: int = typer.Option(settings.port, help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    typer.echo(f"[serve] Listening on {host}:{port}")
    uvicorn.run("agrihub.api.app:app", host=host, port=port, reload=reload)


@app.command("scans")
def scans(
    farm_name: str = typer.Argument(..., help="Farm name."),
    page: int = typer.Option(1, help="Page number (clamped to >= 1)."),
    limit: int = typer.Option(10, help="Page size (clamped to 1..100)."),
) -> None:
    """Print one page of scan history as JSON (image bytes omitted)."""
    try:
        store = GraphStore.connect()
    except AgrihubError as e:
        typer.echo(f"[scans] ✗ {e}")
        raise typer.Exit(1)

    cache = CacheStore.connect()
    try:
        result = get_farm_scans(store, cache, farm_name, page, limit)
    except AgrihubError as e:
        typer.echo(f"[scans] ✗ {e}")
        raise typer.Exit(1)
    finally:
        store.close()
        cache.close()

    payload = result.model_dump_json(
        by_alias=True,
        indent=2,
        exclude={
            "plant_scans": {"__all__": {"image_bytes"}},
        },
    )
    typer.echo(payload)
    p = result.pagination
    typer.echo(f"[scans] page {p.page}/{p.total_pages}  total={p.total}", err=True)


@app.command("token")
def token(
    subject: str = typer.Argument(..., help="User name to embed in the token."),
    hours: int = typer.Option(24, help="Token lifetime in hours."),
) -> None:
    """Sign an access token with JWT_SECRET_KEY."""
    from datetime import timedelta

    try:
        signed = IdentityVerifier(store=None).issue(subject, timedelta(hours=hours))
    except AgrihubError as e:
        typer.echo(f"[token] ✗ {e}")
        raise typer.Exit(1)
    typer.echo(signed)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
