"""Marketplace endpoints.

Routes
------
GET  /api/marketplace/valid-farmplots     All valid farm plot listings
GET  /api/marketplace/featured-property   One listing at random
POST /api/marketplace/buy-from-listing    Body: {"listingId": "..", "quantity": "1"}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agrihub.api.deps import bearer_token, cache_store, chain_engine, identity_verifier
from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.chain.models import BuyFromListingRequest, BuyFromListingResponse, FarmPlotListing
from agrihub.services import marketplace as marketplace_service

router = APIRouter()


@router.get("/valid-farmplots", response_model=list[FarmPlotListing])
def valid_farm_plots(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
    cache: CacheStore = Depends(cache_store),
) -> list[FarmPlotListing]:
    return marketplace_service.get_valid_farm_plot_listings(verifier, engine, cache, token)


@router.get("/featured-property", response_model=FarmPlotListing)
def featured_property(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
    cache: CacheStore = Depends(cache_store),
) -> FarmPlotListing:
    return marketplace_service.featured_property(verifier, engine, cache, token)


@router.post("/buy-from-listing", response_model=BuyFromListingResponse)
def buy_from_listing(
    body: BuyFromListingRequest,
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
) -> BuyFromListingResponse:
    return marketplace_service.buy_from_listing(verifier, engine, token, body)
