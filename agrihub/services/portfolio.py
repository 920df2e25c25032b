"""Per-user farm plot holdings.

Both views are keyed by the verified subject and cached briefly; the full
view also carries each NFT's image.
"""

from __future__ import annotations

from typing import Callable, Optional

from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache import keys
from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.chain.models import NFTItem
from agrihub.config import settings
from agrihub.images import enrich, image_fetcher
from agrihub.serialization import to_cache
from agrihub.services.models import EntirePortfolio, NFTItemWithImage, PortfolioSummary

Fetch = Callable[[str], bytes]


def get_portfolio_summary(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    cache: CacheStore,
    token: str,
) -> PortfolioSummary:
    subject = verifier.verify(token)

    def load() -> PortfolioSummary:
        nfts = engine.get_owned_nfts(settings.farm_plot_contract, subject)
        return PortfolioSummary(farm_plot_nft_count=len(nfts))

    return get_or_compute(
        cache,
        keys.subject_key(keys.PORTFOLIO, subject),
        keys.PORTFOLIO_SUMMARY_TTL,
        load,
        dump=to_cache,
        load=PortfolioSummary.model_validate,
    )


def attach_nft_images(
    nfts: list[NFTItem],
    cache: CacheStore,
    *,
    fetch: Optional[Fetch] = None,
) -> list[NFTItemWithImage]:
    with image_fetcher(cache, fetch) as fetch_one:
        enriched = enrich(
            nfts,
            lambda nft: nft.metadata.image_reference(),
            fetch_one,
            concurrency_limit=settings.image_fetch_concurrency,
            describe=lambda nft: f"NFT {nft.metadata.id}",
        )
    return [
        NFTItemWithImage(**e.record.model_dump(), image_bytes=e.image_bytes)
        for e in enriched
    ]


def get_entire_portfolio(
    verifier: IdentityVerifier,
    engine: ChainEngine,
    cache: CacheStore,
    token: str,
    *,
    fetch: Optional[Fetch] = None,
) -> EntirePortfolio:
    """Every farm plot NFT the subject owns, each with its image."""
    subject = verifier.verify(token)

    def load() -> EntirePortfolio:
        nfts = engine.get_owned_nfts(settings.farm_plot_contract, subject)
        return EntirePortfolio(farm_plot_nfts=attach_nft_images(nfts, cache, fetch=fetch))

    return get_or_compute(
        cache,
        keys.subject_key(keys.ENTIRE_PORTFOLIO, subject),
        keys.ENTIRE_PORTFOLIO_TTL,
        load,
        dump=to_cache,
        load=EntirePortfolio.model_validate,
    )
