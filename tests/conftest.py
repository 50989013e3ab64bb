import pytest

from truerandom.cache import FillPolicy, SupplyCache
from tests.fakes import FakeSource, ManualExecutor, Recorder


@pytest.fixture
def executor():
    return ManualExecutor()


@pytest.fixture
def fallback():
    return lambda: 0.25


@pytest.fixture
def alerts():
    return Recorder()


@pytest.fixture
def make_cache(executor, fallback, alerts):
    def _make(buffer=(), capacity=10, threshold=0.5, source="default", now_ms=0, **kwargs):
        cache = SupplyCache(fallback, FillPolicy(capacity, threshold), executor=executor,
                            alert=alerts, clock_ms=lambda: now_ms, **kwargs)
        if source == "default":
            source = FakeSource()
        # bound directly so no startup refill is queued
        cache._source = source
        cache._buf.extend(buffer)
        return cache
    return _make
