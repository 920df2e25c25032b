"""Cache maintenance commands for scan pages."""

import typer

from agrihub.cache import keys
from agrihub.cache.store import CacheStore
from agrihub.db.connection import GraphStore
from agrihub.errors import AgrihubError, CacheError
from agrihub.services.farm import WARM_PAGES, invalidate_farm_scans, warm_farm_scans_cache

cache_app = typer.Typer(help="Inspect and maintain the response cache.", no_args_is_help=True)


@cache_app.command("warm-scans")
def cache_warm_scans(
    farm_name: str = typer.Argument(..., help="Farm whose scan pages should be preloaded."),
) -> None:
    """Load the common scan page shapes into the cache."""
    cache = CacheStore.connect()
    if not cache.available:
        typer.echo("❌ Cache is unavailable; nothing to warm.")
        raise typer.Exit(code=1)

    try:
        store = GraphStore.connect()
    except AgrihubError as e:
        typer.echo(f"❌ Error: {e}")
        cache.close()
        raise typer.Exit(code=1)

    try:
        count = warm_farm_scans_cache(store, cache, farm_name)
        typer.echo(f"✅ Warmed {count} scan pages for {farm_name!r}")
    except AgrihubError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        store.close()
        cache.close()


@cache_app.command("invalidate-scans")
def cache_invalidate_scans(
    farm_name: str = typer.Argument(..., help="Farm whose cached scan pages should be dropped."),
) -> None:
    """Drop the warmed scan pages (use after a new scan is written)."""
    cache = CacheStore.connect()
    try:
        removed = invalidate_farm_scans(cache, farm_name)
    except AgrihubError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        cache.close()
    typer.echo(f"🗑️  Removed {removed} of {len(WARM_PAGES)} scan pages for {farm_name!r}")


@cache_app.command("ttl")
def cache_ttl(
    farm_name: str = typer.Argument(..., help="Farm name."),
    page: int = typer.Option(1, help="Page number."),
    limit: int = typer.Option(10, help="Page size."),
) -> None:
    """Show how long a cached scan page has left."""
    key = keys.paginated_key(keys.FARM_SCANS, farm_name, page, limit)
    cache = CacheStore.connect()
    try:
        remaining = cache.ttl(key)
    except CacheError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        cache.close()

    if remaining is None:
        typer.echo(f"{key}: not cached")
    else:
        typer.echo(f"{key}: {remaining:.0f}s remaining")
