"""Portfolio endpoints: ``GET /api/portfolio/summary`` and ``GET /api/portfolio/entire``."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agrihub.api.deps import bearer_token, cache_store, chain_engine, identity_verifier
from agrihub.auth.verifier import IdentityVerifier
from agrihub.cache.store import CacheStore
from agrihub.chain.engine import ChainEngine
from agrihub.services import portfolio as portfolio_service
from agrihub.services.models import EntirePortfolio, PortfolioSummary

router = APIRouter()


@router.get("/summary", response_model=PortfolioSummary)
def summary(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
    cache: CacheStore = Depends(cache_store),
) -> PortfolioSummary:
    return portfolio_service.get_portfolio_summary(verifier, engine, cache, token)


@router.get("/entire", response_model=EntirePortfolio)
def entire(
    token: str = Depends(bearer_token),
    verifier: IdentityVerifier = Depends(identity_verifier),
    engine: ChainEngine = Depends(chain_engine),
    cache: CacheStore = Depends(cache_store),
) -> EntirePortfolio:
    return portfolio_service.get_entire_portfolio(verifier, engine, cache, token)
