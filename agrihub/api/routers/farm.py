"""Farm endpoints.

Routes
------
GET /api/farm/list                 Every farm with its image
GET /api/farm/scans/{farm_name}    One page of plant scans and soil readings
                                   (?page=1&limit=10)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agrihub.api.deps import cache_store, current_subject, graph_store
from agrihub.cache.store import CacheStore
from agrihub.db.connection import GraphStore
from agrihub.services import farm as farm_service
from agrihub.services.models import FarmListing, FarmScanResult

router = APIRouter()


@router.get("/list", response_model=list[FarmListing])
def farm_list(
    subject: str = Depends(current_subject),
    store: GraphStore = Depends(graph_store),
    cache: CacheStore = Depends(cache_store),
) -> list[FarmListing]:
    return farm_service.get_farm_list(store, cache)


@router.get("/scans/{farm_name}", response_model=FarmScanResult)
def farm_scans(
    farm_name: str,
    page: int = 1,
    limit: int = 10,
    subject: str = Depends(current_subject),
    store: GraphStore = Depends(graph_store),
    cache: CacheStore = Depends(cache_store),
) -> FarmScanResult:
    """Paginated scan history; out-of-range ``page``/``limit`` are clamped."""
    return farm_service.get_farm_scans(store, cache, farm_name, page, limit)
