"""Marketplace listings of farm plot NFTs."""

from __future__ import annotations

import random
from typing import Any, Callable, Optional

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache import keys
from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.chain.models import BuyFromListingRequest, BuyFromListingResponse, FarmPlotListing
from agrihub.config import settings
from agrihub.errors import NotFoundError
from agrihub.images import enrich, image_fetcher
from agrihub.serialization import to_cache

Fetch = Callable[[str], bytes]


def _dump_listings(listings: list[FarmPlotListing]) -> list[dict[str, Any]]:
    return [to_cache(listing) for listing in listings]


def _load_listings(raw: Any) -> list[FarmPlotListing]:
    if not isinstance(raw, list):
        raise TypeError("cached listings are not a list")
    return [FarmPlotListing.model_validate(item) for item in raw]


def fetch_valid_listings(
    engine: ChainEngine,
    cache: CacheStore,
    *,
    contract: Optional[str] = None,
    fetch: Optional[Fetch] = None,
) -> list[FarmPlotListing]:
    """All valid direct listings on *contract* with asset images attached.

    Cached for five minutes per ``(chain, contract)``.

    Raises:
        ChainError: The engine call failed.
    """
    contract = contract or settings.marketplace_contract
    key = keys.entity_key(keys.FARM_PLOT_LISTINGS, engine.chain_id, contract)

    def load() -> list[FarmPlotListing]:
        listings = engine.get_all_valid_listings(contract)
        with image_fetcher(cache, fetch) as fetch_one:
            enriched = enrich(
                listings,
                lambda listing: listing.asset.image_reference(),
                fetch_one,
                concurrency_limit=settings.image_fetch_concurrency,
                describe=lambda listing: f"listing {listing.id}",
            )
        return [e.record.model_copy(update={"image_bytes": e.image_bytes}) for e in enriched]

    return get_or_compute(
        cache,
        key,
        keys.LISTINGS_TTL,
        load,
        dump=_dump_listings,
        load=_load_listings,
    )


def get_valid_farm_plot_listings(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    cache: CacheStore,
    token: str,
    *,
    fetch: Optional[Fetch] = None,
) -> list[FarmPlotListing]:
    """Listings visible to the caller behind *token*.

    Raises:
        AuthError: *token* did not verify.
        NotFoundError: The marketplace holds no valid listings.
    """
    verifier.verify(token)
    listings = fetch_valid_listings(engine, cache, fetch=fetch)
    if not listings:
        raise NotFoundError("no farm plot listings available")
    return listings


def featured_property(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    cache: CacheStore,
    token: str,
    *,
    fetch: Optional[Fetch] = None,
    rng: Optional[random.Random] = None,
) -> FarmPlotListing:
    """One listing picked at random."""
    listings = get_valid_farm_plot_listings(verifier, engine, cache, token, fetch=fetch)
    return (rng or random).choice(listings)


def buy_from_listing(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    token: str,
    request: BuyFromListingRequest,
) -> BuyFromListingResponse:
    """Purchase on behalf of the verified subject; any buyer in *request* is replaced."""
    subject = verifier.verify(token)
    order = request.model_copy(update={"buyer": subject})
    print(f"[MARKET] Buying listing {order.listing_id} x{order.quantity} for {subject}")
    receipt = engine.buy_from_listing(settings.marketplace_contract, order)
    if isinstance(receipt, dict) and "receipt" in receipt:
        receipt = receipt["receipt"]
    return BuyFromListingResponse(receipt=receipt)
