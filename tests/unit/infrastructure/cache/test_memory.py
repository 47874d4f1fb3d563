import pytest

from reactivecache.domain.models.reply import Record
from reactivecache.infrastructure.cache.memory import DEFAULT_MAX_ENTRIES, MemoryCache


def record(data):
    return Record(data=data, timestamp=1)


def test_default_bound():
    assert MemoryCache().max_entries == DEFAULT_MAX_ENTRIES


def test_least_recently_stored_record_is_dropped():
    memory = MemoryCache(max_entries=2)
    memory.put("a", record(1))
    memory.put("b", record(2))
    memory.put("c", record(3))
    assert memory.keys() == ["b", "c"]
    assert memory.get("a") is None


def test_reads_refresh_recency():
    memory = MemoryCache(max_entries=2)
    memory.put("a", record(1))
    memory.put("b", record(2))
    memory.get("a")
    memory.put("c", record(3))
    assert sorted(memory.keys()) == ["a", "c"]


def test_overwriting_a_key_does_not_grow_the_layer():
    memory = MemoryCache(max_entries=2)
    memory.put("a", record(1))
    memory.put("b", record(2))
    memory.put("a", record(10))
    assert memory.keys() == ["b", "a"]
    assert memory.get("a").data == 10


def test_evict_and_evict_all():
    memory = MemoryCache()
    memory.put("a", record(1))
    memory.put("b", record(2))
    memory.evict("a")
    memory.evict("missing")
    assert memory.keys() == ["b"]
    memory.evict_all()
    assert memory.keys() == []


@pytest.mark.parametrize("max_entries", [0, -1])
def test_rejects_non_positive_bound(max_entries):
    with pytest.raises(ValueError):
        MemoryCache(max_entries=max_entries)
