"""Tests for agrihub.cache: codec, key derivation, Redis wrapper, read-through."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import redis

from agrihub.cache import keys
from agrihub.cache.read_through import get_or_compute
from agrihub.cache.store import CacheStore, dumps, loads
from agrihub.errors import CacheError


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

class TestCodec:
    def test_bytes_and_datetimes_survive(self) -> None:
        stamp = datetime(2024, 3, 5, 14, 7, tzinfo=timezone.utc)
        value = {"imageBytes": b"\x89PNG", "createdAt": stamp, "n": 3, "items": [b"a"]}
        assert loads(dumps(value)) == value

    def test_unserialisable_value_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            dumps({"x": object()})


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------

class TestKeys:
    def test_paginated_key_shape(self) -> None:
        key = keys.paginated_key(keys.FARM_SCANS, "papaya_farm", 2, 10)
        assert key == "farm_scans:papaya_farm:page_2:limit_10"

    def test_distinct_parameters_give_distinct_keys(self) -> None:
        seen = {
            keys.paginated_key(keys.FARM_SCANS, name, page, limit)
            for name in ("a", "b")
            for page in (1, 2)
            for limit in (10, 20)
        }
        assert len(seen) == 8

    def test_separator_in_identifier_cannot_collide(self) -> None:
        assert keys.entity_key("c", "a:b", "c") != keys.entity_key("c", "a", "b:c")
        assert keys.entity_key("c", "a%3Ab") != keys.entity_key("c", "a:b")

    def test_entity_key_requires_identifier(self) -> None:
        with pytest.raises(ValueError):
            keys.entity_key(keys.PORTFOLIO)

    def test_subject_key(self) -> None:
        assert keys.subject_key(keys.PORTFOLIO, "0xabc") == "portfolio:0xabc"

    def test_content_key_is_fixed_length(self) -> None:
        key = keys.content_key(keys.IMAGE, "https://x/" + "y" * 5000)
        assert len(key) == len("image:") + 64

    def test_lifetimes(self) -> None:
        assert keys.IMAGE_TTL == timedelta(hours=1)
        assert keys.FARM_SCANS_TTL == timedelta(minutes=5)
        assert keys.PORTFOLIO_SUMMARY_TTL == timedelta(minutes=3)
        assert keys.ENTIRE_PORTFOLIO_TTL == timedelta(minutes=5)


# ---------------------------------------------------------------------------
# CacheStore
# ---------------------------------------------------------------------------

class TestCacheStore:
    def test_set_uses_millisecond_expiry(self) -> None:
        client = MagicMock()
        store = CacheStore(client)

        store.set("k", {"a": 1}, timedelta(minutes=5))

        client.set.assert_called_once()
        args, kwargs = client.set.call_args
        assert args[0] == "k"
        assert loads(args[1]) == {"a": 1}
        assert kwargs["px"] == 300_000

    def test_get_decodes(self) -> None:
        client = MagicMock()
        client.get.return_value = dumps({"b": b"\x01"}).encode()
        assert CacheStore(client).get("k") == {"b": b"\x01"}

    def test_get_miss_is_none(self) -> None:
        client = MagicMock()
        client.get.return_value = None
        assert CacheStore(client).get("k") is None

    def test_undecodable_value_raises_cache_error(self) -> None:
        client = MagicMock()
        client.get.return_value = b"{not json"
        with pytest.raises(CacheError):
            CacheStore(client).get("k")

    def test_redis_failure_becomes_cache_error(self) -> None:
        client = MagicMock()
        client.exists.side_effect = redis.ConnectionError("down")
        with pytest.raises(CacheError):
            CacheStore(client).exists("k")

    def test_ttl_reports_seconds(self) -> None:
        client = MagicMock()
        client.pttl.return_value = 1500
        assert CacheStore(client).ttl("k") == 1.5
        client.pttl.return_value = -2
        assert CacheStore(client).ttl("k") is None

    def test_unavailable_store(self) -> None:
        store = CacheStore(None)
        assert not store.available
        assert store.exists("k") is False
        with pytest.raises(CacheError):
            store.get("k")
        with pytest.raises(CacheError):
            store.set("k", 1, 10)

    def test_connect_degrades_when_unreachable(self, monkeypatch) -> None:
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        monkeypatch.setattr("agrihub.cache.store.redis.Redis", MagicMock(return_value=client))

        store = CacheStore.connect(host="nowhere", port=1)

        assert not store.available


# ---------------------------------------------------------------------------
# get_or_compute
# ---------------------------------------------------------------------------

class TestGetOrCompute:
    def test_miss_computes_and_stores(self, cache) -> None:
        calls = []

        def compute() -> dict:
            calls.append(1)
            return {"v": 1}

        assert get_or_compute(cache, "k", timedelta(minutes=1), compute) == {"v": 1}
        assert calls == [1]
        assert cache.ttls["k"] == 60

    def test_hit_short_circuits(self, cache) -> None:
        calls = []

        def compute() -> dict:
            calls.append(1)
            return {"v": len(calls)}

        first = get_or_compute(cache, "k", timedelta(minutes=1), compute)
        second = get_or_compute(cache, "k", timedelta(minutes=1), compute)

        assert first == second == {"v": 1}
        assert calls == [1]

    def test_dump_and_load_are_applied(self, cache) -> None:
        result = get_or_compute(
            cache, "k", timedelta(minutes=1), lambda: 3, dump=lambda v: {"n": v}, load=lambda d: d["n"]
        )
        assert result == 3
        assert cache.get("k") == {"n": 3}
        assert get_or_compute(cache, "k", timedelta(minutes=1), lambda: 99, load=lambda d: d["n"]) == 3

    def test_unreadable_entry_is_recomputed(self, cache) -> None:
        cache.set("k", "garbage", 60)

        def load(raw):
            raise ValueError("old shape")

        assert get_or_compute(cache, "k", timedelta(minutes=1), lambda: 7, load=load) == 7

    def test_cache_outage_is_transparent(self, broken_cache) -> None:
        assert get_or_compute(broken_cache, "k", timedelta(minutes=1), lambda: "live") == "live"

    def test_compute_errors_propagate_and_nothing_is_cached(self, cache) -> None:
        def compute():
            raise RuntimeError("store down")

        with pytest.raises(RuntimeError):
            get_or_compute(cache, "k", timedelta(minutes=1), compute)
        assert cache.sets == []
