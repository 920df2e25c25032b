"""Farm listing and paginated scan history.

``get_farm_scans`` is the hot path: four independent graph queries run
concurrently, plant scans on the current page get their images attached, and
the assembled page is cached for five minutes under a key derived from
``(farm_name, page, limit)``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Optional

from agrihub.cache import keys
from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore
from agrihub.config import settings
from agrihub.db.connection import GraphStore, Row
from agrihub.db.dates import format_date, parse_date
from agrihub.db.records import get_float, get_int, get_map, str_or_empty
from agrihub.errors import CacheError, QueryError
from agrihub.images import enrich, image_fetcher
from agrihub.serialization import to_cache
from agrihub.services.interpretation import (
    parse_plant_interpretation,
    parse_soil_interpretation,
)
from agrihub.services.models import (
    FarmCoordinates,
    FarmListing,
    FarmScanResult,
    PlantScan,
    SoilReading,
)
from agrihub.services.pagination import build_pagination, normalize_pagination, page_offset
from agrihub.services.validation import validate_farm_name

Fetch = Callable[[str], bytes]

# Page shapes requested by the mobile client right after a scan upload.
WARM_PAGES = ((1, 10), (1, 20), (2, 10))

# Plant scans were written with different timestamp fields over time.
PLANT_DATE_FIELDS = ("date", "createdAt", "created_at", "timestamp")

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

FARM_LIST_QUERY = """
MATCH (f:Farm)
RETURN f.id AS id,
       f.farmName AS farmName,
       f.cropType AS cropType,
       f.description AS description,
       f.createdAt AS createdAt,
       f.updatedAt AS updatedAt,
       f.coordinates AS coordinates,
       f.image AS image,
       f.owner AS owner,
       f.location AS location,
       f.lat AS lat,
       f.lng AS lng
"""

PLANT_SCANS_QUERY = """
MATCH (f:Farm {farmName: $farmName})-[:HAS_PLANT_SCAN]->(ps:PlantScan)
WITH ps ORDER BY COALESCE(ps.date, ps.createdAt, ps.created_at, ps.timestamp, '1970-01-01T00:00:00Z') DESC
RETURN ps.cropType AS cropType,
       ps.note AS note,
       ps.date AS date,
       ps.createdAt AS createdAt,
       ps.created_at AS created_at,
       ps.timestamp AS timestamp,
       ps.id AS id,
       ps.interpretation AS interpretation,
       ps.imageUri AS imageUri
SKIP $offset LIMIT $limit
"""

SOIL_READINGS_QUERY = """
MATCH (f:Farm {farmName: $farmName})-[:HAS_SENSOR]->(s:Sensor)-[:HAS_READING]->(r:Reading)
OPTIONAL MATCH (r)-[:INTERPRETED_AS]->(i:Interpretation)
WITH r, i ORDER BY r.createdAt DESC
RETURN r.fertility AS fertility,
       r.moisture AS moisture,
       r.ph AS ph,
       r.temperature AS temperature,
       r.sunlight AS sunlight,
       r.humidity AS humidity,
       r.farmName AS farmName,
       r.cropType AS cropType,
       r.sensorId AS sensorId,
       r.id AS id,
       r.createdAt AS createdAt,
       r.submittedAt AS submittedAt,
       i.value AS interpretation
SKIP $offset LIMIT $limit
"""

PLANT_SCANS_COUNT_QUERY = """
MATCH (f:Farm {farmName: $farmName})-[:HAS_PLANT_SCAN]->(ps:PlantScan)
RETURN COUNT(ps) AS total
"""

SOIL_READINGS_COUNT_QUERY = """
MATCH (f:Farm {farmName: $farmName})-[:HAS_SENSOR]->(s:Sensor)-[:HAS_READING]->(r:Reading)
RETURN COUNT(r) AS total
"""


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------

def _first_date(row: Row, fields: tuple[str, ...]) -> Optional[datetime]:
    for name in fields:
        parsed = parse_date(row.get(name))
        if parsed is not None:
            return parsed
    return None


def _id(row: Row) -> str:
    value = row.get("id")
    if value is None or isinstance(value, bool):
        return ""
    return value if isinstance(value, str) else str(value)


def row_to_farm(row: Row) -> FarmListing:
    created_at = parse_date(row.get("createdAt"))
    updated_at = parse_date(row.get("updatedAt"))

    coordinates = FarmCoordinates()
    coords = get_map(row, "coordinates")
    if coords is not None:
        coordinates = FarmCoordinates(
            lat=get_float(coords, "lat") or 0.0,
            lng=get_float(coords, "lng") or 0.0,
        )
    elif get_float(row, "lat") is not None or get_float(row, "lng") is not None:
        coordinates = FarmCoordinates(lat=get_float(row, "lat") or 0.0, lng=get_float(row, "lng") or 0.0)

    return FarmListing(
        owner=str_or_empty(row, "owner"),
        farm_name=str_or_empty(row, "farmName"),
        id=_id(row),
        crop_type=str_or_empty(row, "cropType"),
        description=str_or_empty(row, "description"),
        image=str_or_empty(row, "image"),
        coordinates=coordinates,
        created_at=created_at,
        updated_at=updated_at,
        formatted_created_at=format_date(created_at),
        formatted_updated_at=format_date(updated_at),
        location=str_or_empty(row, "location"),
    )


def row_to_plant_scan(row: Row) -> PlantScan:
    created_at = _first_date(row, PLANT_DATE_FIELDS)
    return PlantScan(
        crop_type=str_or_empty(row, "cropType"),
        note=str_or_empty(row, "note"),
        created_at=created_at,
        formatted_created_at=format_date(created_at, with_time=True),
        id=_id(row),
        interpretation=parse_plant_interpretation(row.get("interpretation")),
        image_uri=str_or_empty(row, "imageUri"),
    )


def row_to_soil_reading(row: Row) -> SoilReading:
    created_at = parse_date(row.get("createdAt"))
    submitted_at = parse_date(row.get("submittedAt"))
    return SoilReading(
        fertility=get_float(row, "fertility"),
        moisture=get_float(row, "moisture"),
        ph=get_float(row, "ph"),
        temperature=get_float(row, "temperature"),
        sunlight=get_float(row, "sunlight"),
        humidity=get_float(row, "humidity"),
        farm_name=str_or_empty(row, "farmName"),
        crop_type=str_or_empty(row, "cropType"),
        sensor_id=str_or_empty(row, "sensorId"),
        id=_id(row),
        created_at=created_at,
        submitted_at=submitted_at,
        formatted_created_at=format_date(created_at, with_time=True),
        formatted_submitted_at=format_date(submitted_at, with_time=True),
        interpretation=parse_soil_interpretation(row.get("interpretation")),
    )


def _total(rows: list[Row]) -> int:
    if not rows:
        return 0
    return get_int(rows[0], "total") or 0


# ---------------------------------------------------------------------------
# Farm list
# ---------------------------------------------------------------------------

def get_farm_list(
    store: GraphStore,
    cache: CacheStore,
    *,
    fetch: Optional[Fetch] = None,
) -> list[FarmListing]:
    """Every farm with formatted dates and its image attached.

    Raises:
        QueryError: The farm query failed.
    """
    farms = [row_to_farm(row) for row in store.read_query(FARM_LIST_QUERY)]

    with image_fetcher(cache, fetch) as fetch_one:
        enriched = enrich(
            farms,
            lambda farm: farm.image,
            fetch_one,
            concurrency_limit=settings.image_fetch_concurrency,
            describe=lambda farm: farm.farm_name or farm.id,
        )

    return [e.record.model_copy(update={"image_bytes": e.image_bytes}) for e in enriched]


# ---------------------------------------------------------------------------
# Farm scans
# ---------------------------------------------------------------------------

def _run_scan_queries(store: GraphStore, farm_name: str, page: int, limit: int) -> dict[str, list[Row]]:
    page_params: dict[str, Any] = {
        "farmName": farm_name,
        "offset": page_offset(page, limit),
        "limit": limit,
    }
    count_params: dict[str, Any] = {"farmName": farm_name}
    queries = {
        "plant scans": (PLANT_SCANS_QUERY, page_params),
        "soil readings": (SOIL_READINGS_QUERY, page_params),
        "plant scan count": (PLANT_SCANS_COUNT_QUERY, count_params),
        "soil reading count": (SOIL_READINGS_COUNT_QUERY, count_params),
    }

    results: dict[str, list[Row]] = {}
    with ThreadPoolExecutor(max_workers=len(queries)) as pool:
        futures = {
            name: pool.submit(store.read_query, query, params)
            for name, (query, params) in queries.items()
        }
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except QueryError as exc:
                raise QueryError(f"failed to fetch {name} for {farm_name!r}: {exc}") from exc
    return results


def _load_farm_scans(
    store: GraphStore,
    cache: CacheStore,
    farm_name: str,
    page: int,
    limit: int,
    fetch: Optional[Fetch],
) -> FarmScanResult:
    rows = _run_scan_queries(store, farm_name, page, limit)

    plant_scans = [row_to_plant_scan(row) for row in rows["plant scans"]]
    soil_readings = [row_to_soil_reading(row) for row in rows["soil readings"]]

    with image_fetcher(cache, fetch) as fetch_one:
        enriched = enrich(
            plant_scans,
            lambda scan: scan.image_uri,
            fetch_one,
            concurrency_limit=settings.image_fetch_concurrency,
            describe=lambda scan: scan.id or scan.image_uri,
        )
    plant_scans = [e.record.model_copy(update={"image_bytes": e.image_bytes}) for e in enriched]

    # Plant scans and soil readings share one page cursor; the larger stream
    # decides how many pages exist.
    total = max(_total(rows["plant scan count"]), _total(rows["soil reading count"]))

    return FarmScanResult(
        plant_scans=plant_scans,
        soil_readings=soil_readings,
        pagination=build_pagination(page, limit, total),
    )


def get_farm_scans(
    store: GraphStore,
    cache: CacheStore,
    farm_name: str,
    page: int = 1,
    limit: int = 10,
    *,
    fetch: Optional[Fetch] = None,
) -> FarmScanResult:
    """One page of a farm's plant scans and soil readings.

    Args:
        store: Graph store.
        cache: Cache store; a hit skips every query and image fetch.
        farm_name: Farm identifier.
        page: 1-based page, clamped to ``>= 1``.
        limit: Page size, clamped to ``1..100``.
        fetch: Image fetch override (defaults to a cached HTTP fetch).

    Raises:
        ValidationError: *farm_name* is malformed.
        QueryError: Any of the four queries failed.
    """
    validate_farm_name(farm_name)
    page, limit = normalize_pagination(page, limit)
    key = keys.paginated_key(keys.FARM_SCANS, farm_name, page, limit)

    return get_or_compute(
        cache,
        key,
        keys.FARM_SCANS_TTL,
        lambda: _load_farm_scans(store, cache, farm_name, page, limit, fetch),
        dump=to_cache,
        load=FarmScanResult.model_validate,
    )


def warm_farm_scans_cache(
    store: GraphStore,
    cache: CacheStore,
    farm_name: str,
    *,
    fetch: Optional[Fetch] = None,
) -> int:
    """Populate the cache for the common page shapes; returns how many were loaded."""
    validate_farm_name(farm_name)
    for page, limit in WARM_PAGES:
        get_farm_scans(store, cache, farm_name, page, limit, fetch=fetch)
        print(f"[FARM] Warmed scans cache for {farm_name!r} page={page} limit={limit}")
    return len(WARM_PAGES)


def invalidate_farm_scans(cache: CacheStore, farm_name: str) -> int:
    """Delete the warmed page shapes for *farm_name*; returns how many were removed."""
    validate_farm_name(farm_name)
    removed = 0
    for page, limit in WARM_PAGES:
        key = keys.paginated_key(keys.FARM_SCANS, farm_name, page, limit)
        try:
            if cache.exists(key):
                cache.delete(key)
                removed += 1
        except CacheError as exc:
            print(f"[CACHE] could not invalidate {key}: {exc}")
    return removed
