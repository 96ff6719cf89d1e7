from __future__ import annotations

from typing import List

from naumah.development import (
    FALLBACK_DESCRIPTION,
    fallback_development,
    resolve_baby_development,
    size_for_week,
)
from naumah.local_store import LocalDataStore
from naumah.schemas import BabyDevelopmentRecord
from naumah.storage import MemoryStorage


def test_size_for_week_falls_back_to_first_week() -> None:
    assert size_for_week(20) == ("Banana", "🍌")
    assert size_for_week(45) == size_for_week(1)


def test_fallback_development_uses_size_table() -> None:
    record = fallback_development(18)

    assert record.week == 18
    assert record.size == "Bell pepper"
    assert record.description == FALLBACK_DESCRIPTION
    assert record.key_developments == []


def test_fetched_content_is_cached() -> None:
    store = LocalDataStore(MemoryStorage())
    calls: List[int] = []

    def fetch(week: int) -> dict:
        calls.append(week)
        return {
            "description": "Baby is practicing facial expressions",
            "keyDevelopments": ["Fingerprints form"],
        }

    first = resolve_baby_development(store, 18, fetch)
    second = resolve_baby_development(store, 18, fetch)

    assert calls == [18]
    assert first.week == 18
    assert first.size == "Bell pepper"
    assert second.model_dump() == first.model_dump()
    assert store.get_baby_development_data(18) is not None


def test_fetched_record_week_is_overridden() -> None:
    store = LocalDataStore(MemoryStorage())

    record = resolve_baby_development(
        store,
        9,
        lambda week: BabyDevelopmentRecord(week=1, description="Grape sized", size="Grape"),
    )

    assert record.week == 9
    assert store.get_baby_development_data(9).description == "Grape sized"


def test_fetch_failure_returns_uncached_fallback() -> None:
    store = LocalDataStore(MemoryStorage())

    def fetch(week: int) -> dict:
        raise ConnectionError("content service down")

    record = resolve_baby_development(store, 24, fetch)

    assert record.description == FALLBACK_DESCRIPTION
    assert record.size == "Corn"
    assert store.get_baby_development_data(24) is None


def test_malformed_fetch_returns_fallback() -> None:
    store = LocalDataStore(MemoryStorage())

    record = resolve_baby_development(store, 10, lambda week: {"keyDevelopments": "nope"})

    assert record.description == FALLBACK_DESCRIPTION
    assert store.cached_development_weeks() == []


def test_no_fetcher_returns_fallback() -> None:
    store = LocalDataStore(MemoryStorage())

    assert resolve_baby_development(store, 30).size == "Cabbage"


def test_unavailable_store_still_returns_fetched_content() -> None:
    store = LocalDataStore(MemoryStorage(disabled=True))

    record = resolve_baby_development(
        store, 12, lambda week: {"description": "Reflexes develop"}
    )

    assert record.description == "Reflexes develop"
    assert record.size == "Plum"
