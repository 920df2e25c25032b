"""Cache-key derivation and per-category lifetimes.

Keys are ``<category>:<component>[:<component>...]``.  Components are escaped
so that a ``:`` inside an identifier can never make two different requests
share a key.  Unbounded key material (image URLs) is replaced by its SHA-256
hex digest.
"""

from __future__ import annotations

import hashlib
from datetime import timedelta

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
IMAGE = "image"
FARM_SCANS = "farm_scans"
FARM_PLOT_LISTINGS = "farm_plot_listings"
PORTFOLIO = "portfolio"
ENTIRE_PORTFOLIO = "entire_portfolio"
TOKEN_PRICE = "token_price"

# ---------------------------------------------------------------------------
# Lifetimes
# ---------------------------------------------------------------------------
IMAGE_TTL = timedelta(hours=1)
FARM_SCANS_TTL = timedelta(minutes=5)
PORTFOLIO_SUMMARY_TTL = timedelta(minutes=3)
ENTIRE_PORTFOLIO_TTL = timedelta(minutes=5)
LISTINGS_TTL = timedelta(minutes=5)
TOKEN_PRICE_TTL = timedelta(minutes=2)


def _escape(component: object) -> str:
    return str(component).replace("%", "%25").replace(":", "%3A")


def entity_key(category: str, *identifiers: object) -> str:
    """``<category>:<id>[:<id>...]``, e.g. ``farm_plot_listings:421614:0x20…``."""
    if not identifiers:
        raise ValueError("entity_key() needs at least one identifier")
    return ":".join([category, *(_escape(i) for i in identifiers)])


def paginated_key(category: str, entity: str, page: int, limit: int) -> str:
    """Entity key with ``:page_<page>:limit_<limit>`` appended."""
    return f"{entity_key(category, entity)}:page_{int(page)}:limit_{int(limit)}"


def subject_key(category: str, subject: str) -> str:
    """Identity-scoped key.  *subject* must be the verified identity, never a token."""
    return entity_key(category, subject)


def content_key(category: str, material: str) -> str:
    """Key for unbounded material: ``<category>:<sha256 hex of material>``."""
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return f"{category}:{digest}"
