"""The cache is keyed by the whole context, so unprefixed runs never leak across profiles."""

from __future__ import annotations

import pytest

from lib_layered_vars.application.cache import ResolutionCache
from lib_layered_vars.core import resolve
from lib_layered_vars.domain.errors import InvalidProfile
from lib_layered_vars.domain.model import SKIP_LAYER, ConsumerContext


def make_context(profile: str, consumer: str = "myapp") -> ConsumerContext:
    return ConsumerContext(consumer, profile, {"UAT", "PROD"}, "/d", SKIP_LAYER, SKIP_LAYER)


@pytest.fixture()
def resolver(memory_source, evaluator):
    memory_source.add("UAT", "/d", {"db_host": "uat-db"})
    memory_source.add("PROD", "/d", {"db_host": "prod-db"})

    def run(context: ConsumerContext):
        return resolve(context, source=memory_source, evaluator=evaluator)

    return run


def test_profiles_do_not_share_entries(resolver) -> None:
    cache = ResolutionCache()
    uat = cache.get_or_resolve(make_context("UAT"), resolver)
    prod = cache.get_or_resolve(make_context("PROD"), resolver)
    assert uat.variables["db_host"] == "uat-db"
    assert prod.variables["db_host"] == "prod-db"
    assert len(cache) == 2


def test_hits_return_the_cached_resolution(resolver, memory_source) -> None:
    cache = ResolutionCache()
    first = cache.get_or_resolve(make_context("UAT"), resolver)
    calls = len(memory_source.calls)
    assert cache.get_or_resolve(make_context("UAT"), resolver) is first
    assert len(memory_source.calls) == calls


def test_invalidate_by_consumer(resolver) -> None:
    cache = ResolutionCache()
    cache.get_or_resolve(make_context("UAT"), resolver)
    cache.get_or_resolve(make_context("UAT", consumer="other"), resolver)
    assert cache.invalidate("myapp") == 1
    assert make_context("UAT") not in cache
    assert make_context("UAT", consumer="other") in cache
    cache.clear()
    assert len(cache) == 0


def test_failures_are_not_cached(resolver) -> None:
    cache = ResolutionCache()
    with pytest.raises(InvalidProfile):
        cache.get_or_resolve(make_context("DEV"), resolver)
    assert len(cache) == 0
