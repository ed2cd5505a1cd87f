"""Caller-owned cache for resolutions.

The engine itself never caches. Orchestrators that repeat resolutions across
runs may keep results here; entries are keyed by the complete
:class:`~lib_layered_vars.domain.model.ConsumerContext`, so a run for one
profile can never observe values resolved for another, even when prefixing is
disabled and both runs export identical names. Invalidation is explicit.
"""

from __future__ import annotations

from typing import Callable

from ..domain.model import ConsumerContext
from ..domain.resolution import Resolution
from ..observability import log_debug


class ResolutionCache:
    """Map consumer contexts to resolutions until the caller invalidates them.

    Not thread-safe; give each worker its own instance or guard it externally.

    Examples
    --------
    >>> cache = ResolutionCache()
    >>> len(cache)
    0
    """

    def __init__(self) -> None:
        self._entries: dict[ConsumerContext, Resolution] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, context: object) -> bool:
        return context in self._entries

    def get(self, context: ConsumerContext) -> Resolution | None:
        return self._entries.get(context)

    def put(self, context: ConsumerContext, resolution: Resolution) -> None:
        self._entries[context] = resolution

    def get_or_resolve(self, context: ConsumerContext, resolve: Callable[[ConsumerContext], Resolution]) -> Resolution:
        """Return the cached resolution for *context*, resolving on a miss.

        Failed resolutions are not stored.
        """

        cached = self._entries.get(context)
        if cached is not None:
            log_debug("resolution_cache_hit", consumer=context.consumer_id, profile=context.active_profile)
            return cached
        resolution = resolve(context)
        self._entries[context] = resolution
        return resolution

    def invalidate(self, consumer_id: str | None = None) -> int:
        """Drop entries for *consumer_id* (or all entries) and return the count."""

        doomed = [ctx for ctx in self._entries if consumer_id is None or ctx.consumer_id == consumer_id]
        for ctx in doomed:
            del self._entries[ctx]
        log_debug("resolution_cache_invalidated", consumer=consumer_id, dropped=len(doomed))
        return len(doomed)

    def clear(self) -> None:
        self.invalidate(None)
