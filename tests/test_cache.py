import pytest

from volei.core.cache import (
    ATTENDANCE_STATS,
    FINANCIAL_OVERVIEW,
    STUDENT_STATUS,
    SUMMARY,
    QueryCache,
    make_key,
)


def test_key_ignores_param_order() -> None:
    assert make_key(SUMMARY, {"a": 1, "b": 2}) == make_key(SUMMARY, {"b": 2, "a": 1})
    assert make_key(SUMMARY) == make_key(SUMMARY, {})


@pytest.mark.asyncio
async def test_get_or_load_calls_loader_once() -> None:
    cache = QueryCache()
    calls = []

    async def loader():
        calls.append(1)
        return {"total": 3}

    assert await cache.get_or_load(SUMMARY, None, loader) == {"total": 3}
    assert await cache.get_or_load(SUMMARY, None, loader) == {"total": 3}
    assert len(calls) == 1
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_failed_load_is_not_cached() -> None:
    cache = QueryCache()

    async def broken():
        raise RuntimeError("db down")

    with pytest.raises(RuntimeError):
        await cache.get_or_load(SUMMARY, None, broken)
    assert len(cache) == 0


def test_invalidate_table_drops_dependent_shapes_only() -> None:
    cache = QueryCache()
    cache.set(SUMMARY, None, 1)
    cache.set(FINANCIAL_OVERVIEW, {"months": 6}, 2)
    cache.set(FINANCIAL_OVERVIEW, {"months": 12}, 3)
    cache.set(STUDENT_STATUS, None, 4)
    cache.set(ATTENDANCE_STATS, {"month": "2024-03"}, 5)

    assert cache.invalidate_table("court_expenses") == 3
    assert cache.get(SUMMARY) is None
    assert cache.get(FINANCIAL_OVERVIEW, {"months": 6}) is None
    assert cache.get(STUDENT_STATUS) == 4
    assert cache.get(ATTENDANCE_STATS, {"month": "2024-03"}) == 5

    assert cache.invalidate_table("attendance") == 1
    assert cache.invalidate_table("unknown") == 0


def test_clear() -> None:
    cache = QueryCache()
    cache.set(SUMMARY, None, 1)
    cache.clear()
    assert len(cache) == 0
    assert make_key(SUMMARY) not in cache


@pytest.mark.asyncio
async def test_least_recently_used_entry_is_evicted() -> None:
    cache = QueryCache(max_entries=2)

    async def load_value():
        return "fresh"

    cache.set(SUMMARY, {"today": "2024-03-14"}, "old day")
    cache.set(SUMMARY, {"today": "2024-03-15"}, "today")
    assert cache.get(SUMMARY, {"today": "2024-03-14"}) == "old day"

    await cache.get_or_load(STUDENT_STATUS, None, load_value)
    assert len(cache) == 2
    assert cache.get(SUMMARY, {"today": "2024-03-15"}) is None
    assert cache.get(SUMMARY, {"today": "2024-03-14"}) == "old day"
    assert cache.get(STUDENT_STATUS) == "fresh"


def test_daily_keys_stay_bounded() -> None:
    cache = QueryCache(max_entries=30)
    for day in range(1, 366):
        cache.set(SUMMARY, {"today": day}, day)
    assert len(cache) == 30
    assert cache.get(SUMMARY, {"today": 365}) == 365
    assert cache.get(SUMMARY, {"today": 1}) is None
