import pytest

from reactivecache.domain.errors import EngineFailure, LoaderFailed, PlaceholderLoaderError
from reactivecache.domain.models.config import (
    EvictDynamicKey,
    LoaderSource,
    ProviderConfig,
    StaleFallback,
)
from reactivecache.domain.models.reply import Reply, Source
from reactivecache.infrastructure.cache.processor import ProcessorProvidersImpl


def make_config(
    key="k",
    loader=None,
    force_evict=False,
    detail=True,
    stale=StaleFallback.ENGINE_DEFAULT,
    lifetime=None,
    expirable=True,
    encrypted=False,
):
    return ProviderConfig(
        provider_key=key,
        encrypted=encrypted,
        expirable=expirable,
        lifetime_millis=lifetime,
        loader=loader or LoaderSource.eager("fresh"),
        evict=EvictDynamicKey(force_evict=force_evict),
        detail_response=detail,
        stale_fallback=stale,
    )


async def first(engine, config):
    async for item in engine.process(config):
        return item


def counting_loader(value="loaded"):
    calls = []

    async def loader():
        calls.append(1)
        return value

    return loader, calls


async def failing():
    raise RuntimeError("upstream down")


@pytest.mark.asyncio
async def test_miss_runs_loader_and_stores(engine, two_layers_cache):
    loader, calls = counting_loader()
    reply = await first(engine, make_config(loader=LoaderSource.deferred(loader)))
    assert reply == Reply("loaded", Source.CLOUD, encrypted=False, stale=False)
    assert calls == [1]
    assert two_layers_cache.persistence.retrieve("k").data == "loaded"


@pytest.mark.asyncio
async def test_hit_skips_loader(engine):
    loader, calls = counting_loader()
    await first(engine, make_config(loader=LoaderSource.eager("first")))
    reply = await first(engine, make_config(loader=LoaderSource.deferred(loader)))
    assert reply.data == "first"
    assert reply.source is Source.MEMORY
    assert calls == []


@pytest.mark.asyncio
async def test_disk_hit_is_reported_as_persistence(engine, two_layers_cache):
    await first(engine, make_config())
    two_layers_cache.memory.evict_all()
    reply = await first(engine, make_config())
    assert reply.source is Source.PERSISTENCE


@pytest.mark.asyncio
async def test_bare_value_without_detail_response(engine):
    assert await first(engine, make_config(detail=False)) == "fresh"


@pytest.mark.asyncio
async def test_forced_evict_replaces_live_record(engine):
    await first(engine, make_config(loader=LoaderSource.eager("old")))
    reply = await first(engine, make_config(loader=LoaderSource.eager("new"), force_evict=True))
    assert reply.data == "new"
    assert reply.source is Source.CLOUD
    assert (await first(engine, make_config())).data == "new"


@pytest.mark.asyncio
async def test_expired_record_is_dropped_when_stale_is_denied(engine, clock, two_layers_cache):
    await first(engine, make_config(loader=LoaderSource.eager("old"), lifetime=1_000))
    clock.advance(1_001)
    with pytest.raises(LoaderFailed) as exc_info:
        await first(engine, make_config(
            loader=LoaderSource.deferred(failing), lifetime=1_000, stale=StaleFallback.DENY_STALE,
        ))
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert two_layers_cache.persistence.retrieve("k") is None


@pytest.mark.asyncio
async def test_expired_record_triggers_reload(engine, clock):
    await first(engine, make_config(loader=LoaderSource.eager("old"), lifetime=1_000))
    clock.advance(5_000)
    loader, calls = counting_loader("new")
    reply = await first(engine, make_config(
        loader=LoaderSource.deferred(loader), lifetime=1_000, stale=StaleFallback.ALLOW_STALE,
    ))
    assert reply.data == "new"
    assert reply.source is Source.CLOUD
    assert calls == [1]


@pytest.mark.asyncio
async def test_stale_record_served_when_loader_fails_and_stale_allowed(engine, clock):
    await first(engine, make_config(loader=LoaderSource.eager("old"), lifetime=1_000))
    clock.advance(5_000)
    reply = await first(engine, make_config(
        loader=LoaderSource.deferred(failing), lifetime=1_000, stale=StaleFallback.ALLOW_STALE,
    ))
    assert reply == Reply("old", Source.MEMORY, encrypted=False, stale=True)


@pytest.mark.asyncio
async def test_engine_default_controls_stale_fallback(two_layers_cache, clock):
    lenient = ProcessorProvidersImpl(two_layers_cache, use_expired_data_if_loader_not_available=True)
    await first(lenient, make_config(loader=LoaderSource.eager("old"), lifetime=1_000))
    clock.advance(5_000)
    reply = await first(lenient, make_config(loader=LoaderSource.deferred(failing), lifetime=1_000))
    assert reply.stale is True
    assert reply.data == "old"


@pytest.mark.asyncio
async def test_loader_returning_none_is_a_loader_failure(engine):
    async def nothing():
        return None

    with pytest.raises(LoaderFailed) as exc_info:
        await first(engine, make_config(loader=LoaderSource.deferred(nothing)))
    assert exc_info.value.cause is None


@pytest.mark.asyncio
async def test_placeholder_failure_is_tagged_no_loader(engine):
    async def placeholder():
        raise PlaceholderLoaderError()

    with pytest.raises(LoaderFailed) as exc_info:
        await first(engine, make_config(loader=LoaderSource.deferred(placeholder)))
    assert exc_info.value.no_loader


@pytest.mark.asyncio
async def test_forced_evict_with_failing_loader_still_evicts(engine, two_layers_cache):
    await first(engine, make_config(loader=LoaderSource.eager("old")))
    with pytest.raises(LoaderFailed):
        await first(engine, make_config(
            loader=LoaderSource.deferred(failing), force_evict=True, stale=StaleFallback.DENY_STALE,
        ))
    assert two_layers_cache.memory.get("k") is None
    assert two_layers_cache.persistence.retrieve("k") is None


@pytest.mark.asyncio
async def test_policy_flags_are_stored_with_the_record(engine, two_layers_cache):
    reply = await first(engine, make_config(expirable=False, encrypted=True, lifetime=60_000))
    record = two_layers_cache.persistence.retrieve("k")
    assert record.expirable is False
    assert record.encrypted is True
    assert record.lifetime_millis == 60_000
    assert reply.encrypted is True


@pytest.mark.asyncio
async def test_storage_errors_surface_as_engine_failure(engine, two_layers_cache, mocker):
    mocker.patch.object(two_layers_cache.persistence._cache, "set", side_effect=OSError("disk full"))
    with pytest.raises(EngineFailure) as exc_info:
        await first(engine, make_config())
    assert isinstance(exc_info.value.cause, OSError)


@pytest.mark.asyncio
async def test_evict_all_clears_both_layers(engine, two_layers_cache):
    await first(engine, make_config(key="a"))
    await first(engine, make_config(key="b"))
    await engine.evict_all()
    assert two_layers_cache.memory.keys() == []
    assert two_layers_cache.all_keys() == []
