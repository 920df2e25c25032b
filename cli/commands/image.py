"""Image reference commands."""

from pathlib import Path
from typing import Optional

import typer

from agrihub.cache.store import CacheStore
from agrihub.errors import FetchError
from agrihub.images import fetch_image_bytes, resolve

image_app = typer.Typer(help="Resolve and fetch content-addressed images.", no_args_is_help=True)


@image_app.command("resolve")
def image_resolve(
    reference: str = typer.Argument(..., help="ipfs:// URI, bare hash or gateway URL."),
) -> None:
    """Print the HTTP URL an image reference resolves to."""
    typer.echo(resolve(reference))


@image_app.command("fetch")
def image_fetch(
    reference: str = typer.Argument(..., help="ipfs:// URI, bare hash or HTTP URL."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the bytes to this file."),
) -> None:
    """Fetch an image through the cache and report its size."""
    url = resolve(reference)
    cache = CacheStore.connect()
    try:
        data = fetch_image_bytes(url, cache)
    except FetchError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        cache.close()

    if out is not None:
        out.write_bytes(data)
        typer.echo(f"✅ Saved {len(data)} bytes to {out}")
    else:
        typer.echo(f"✅ {url}: {len(data)} bytes")
