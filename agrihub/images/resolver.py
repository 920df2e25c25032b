"""Content-addressed image references → HTTP URLs → bytes.

``resolve`` is pure string work.  ``fetch_image_bytes`` checks the cache,
falls back to a plain ``httpx`` GET and writes successful bodies back to the
cache for an hour.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Callable, Iterator, Optional

import httpx

from agrihub.cache import keys
from agrihub.cache.store import CacheStore
from agrihub.config import settings
from agrihub.errors import CacheError, FetchError

IPFS_SCHEME = "ipfs://"
HASH_MARKER = "Qm"
HASH_LENGTH = 46

_DEFAULT_HEADERS = {
    "User-Agent": "agrihub/1.0 (+image-resolver)",
    "Accept": "image/*,*/*;q=0.8",
}


def _is_bare_hash(reference: str) -> bool:
    return (
        "://" not in reference
        and len(reference) == HASH_LENGTH
        and reference.startswith(HASH_MARKER)
    )


def _rewrite_gateway_host(url: str, client_id: str, gateway_domain: str) -> str:
    """Swap the client-id label of a ``https://<id>.<gateway>/ipfs/…`` URL."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return url

    host = parsed.host
    suffix = "." + gateway_domain.lower()
    if parsed.scheme != "https" or not host.endswith(suffix) or not parsed.path.startswith("/ipfs/"):
        return url

    # Rebuilt from the original text, not from ``parsed``.
    start = len("https://")
    end = url.index("/", start)
    userinfo, at, hostport = url[start:end].rpartition("@")
    label, rest = hostport.split(".", 1)
    if not label or label == client_id:
        return url
    return f"https://{userinfo}{at}{client_id}.{rest}{url[end:]}"


def resolve(
    reference: str,
    client_id: Optional[str] = None,
    gateway_domain: Optional[str] = None,
) -> str:
    """Turn an image reference into a fetchable HTTP(S) URL.

    Accepted forms:

    * ``""`` → ``""``
    * ``https://<id>.<gateway>/ipfs/<hash>`` → same URL with ``<id>`` replaced
      by the configured client id
    * any other ``http(s)://`` URL → unchanged
    * ``ipfs://<hash>`` or a bare 46-char ``Qm…`` hash → gateway URL
    * anything else → unchanged

    Resolution is idempotent: resolving an already-resolved URL is a no-op.
    """
    if not reference:
        return ""

    client_id = client_id or settings.ipfs_client_id
    gateway_domain = gateway_domain or settings.ipfs_gateway_domain
    if reference.startswith(("http://", "https://")):
        return _rewrite_gateway_host(reference, client_id, gateway_domain)

    base = f"https://{client_id}.{gateway_domain}/ipfs/"
    if reference.startswith(IPFS_SCHEME):
        return base + reference[len(IPFS_SCHEME):]
    if _is_bare_hash(reference):
        return base + reference

    return reference


def image_cache_key(url: str) -> str:
    return keys.content_key(keys.IMAGE, url)


def fetch_image_bytes(
    url: str,
    cache: CacheStore,
    client: Optional[httpx.Client] = None,
) -> bytes:
    """Fetch the raw bytes at *url*, cache-first.

    Args:
        url: Resolved HTTP(S) URL.
        cache: Cache store consulted before (and populated after) the request.
        client: Shared ``httpx.Client``; a short-lived one is opened when omitted.

    Raises:
        FetchError: Empty URL, transport failure, non-2xx status, or empty body.
    """
    if not url:
        raise FetchError(url, "image URL is empty")

    key = image_cache_key(url)
    try:
        if cache.exists(key):
            cached = cache.get(key)
            if isinstance(cached, bytes) and cached:
                return cached
    except CacheError:
        pass  # best-effort: go to the network

    try:
        if client is None:
            with httpx.Client(
                headers=_DEFAULT_HEADERS,
                timeout=settings.request_timeout,
                follow_redirects=True,
            ) as own_client:
                response = own_client.get(url)
        else:
            response = client.get(url)
    except httpx.HTTPError as exc:
        raise FetchError(url, f"request failed: {exc}") from exc

    if not 200 <= response.status_code < 300:
        raise FetchError(
            url,
            f"HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    data = response.content
    if not data:
        raise FetchError(url, "image data is empty", status_code=response.status_code)

    try:
        cache.set(key, data, keys.IMAGE_TTL)
    except CacheError:
        pass  # best-effort

    return data


def build_image_client() -> httpx.Client:
    """Shared client for one fan-out; callers close it (``with`` block)."""
    return httpx.Client(
        headers=_DEFAULT_HEADERS,
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


@contextmanager
def image_fetcher(
    cache: CacheStore,
    fetch: Optional[Callable[[str], bytes]] = None,
) -> Iterator[Callable[[str], bytes]]:
    """Yield a one-argument fetch function backed by one shared client.

    An explicit *fetch* is passed through untouched.
    """
    if fetch is not None:
        yield fetch
        return
    with build_image_client() as client:
        yield partial(fetch_image_bytes, cache=cache, client=client)
