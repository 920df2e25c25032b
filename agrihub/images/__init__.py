"""Images package: reference resolution, cached fetch and bounded enrichment."""

from agrihub.images.enricher import EnrichedRecord, enrich
from agrihub.images.resolver import fetch_image_bytes, image_fetcher, resolve

__all__ = ["resolve", "fetch_image_bytes", "image_fetcher", "enrich", "EnrichedRecord"]
