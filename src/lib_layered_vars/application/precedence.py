"""Override precedence chain.

The order ``PROFILE_DEFAULT < INVENTORY < CALLER_SCOPE < CALL_SITE`` is fixed.
For any name supplied by several sources only the highest source's value
survives; lower values are discarded, never merged.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..domain.model import OverrideSource

Overrides = Mapping[OverrideSource, Mapping[str, Any]]
"""External override values grouped by the source that supplied them."""


def winning_override(key: str, overrides: Overrides) -> tuple[OverrideSource, Any] | None:
    """Return ``(source, value)`` from the highest source defining *key*.

    ``PROFILE_DEFAULT`` entries never win here; the merge engine seeds them
    beneath the defaults layer instead.

    Examples
    --------
    >>> winning_override("db_host", {
    ...     OverrideSource.INVENTORY: {"db_host": "db2"},
    ...     OverrideSource.CALL_SITE: {"db_host": "db3"},
    ... })
    (<OverrideSource.CALL_SITE: 3>, 'db3')
    >>> winning_override("db_port", {OverrideSource.INVENTORY: {"db_host": "db2"}}) is None
    True
    """

    for source in sorted(overrides, key=OverrideSource.parse, reverse=True):
        rank = OverrideSource.parse(source)
        if rank is OverrideSource.PROFILE_DEFAULT:
            continue
        values = overrides[source]
        if key in values:
            return rank, values[key]
    return None


def flatten_overrides(overrides: Overrides) -> dict[str, Any]:
    """Collapse *overrides* into one mapping applying strict precedence.

    Arrival order of the sources does not matter, only their rank.

    Examples
    --------
    >>> flatten_overrides({
    ...     OverrideSource.CALL_SITE: {"a": 3},
    ...     OverrideSource.INVENTORY: {"a": 1, "b": 1},
    ... })
    {'a': 3, 'b': 1}
    """

    flattened: dict[str, Any] = {}
    for source in sorted(overrides, key=OverrideSource.parse):
        if OverrideSource.parse(source) is OverrideSource.PROFILE_DEFAULT:
            continue
        flattened.update(overrides[source])
    return flattened


def normalize_overrides(overrides: Mapping[OverrideSource | str, Mapping[str, Any]] | None) -> dict[OverrideSource, dict[str, Any]]:
    """Key *overrides* by :class:`OverrideSource` members, merging duplicates.

    Examples
    --------
    >>> normalize_overrides({"call_site": {"a": 1}})
    {<OverrideSource.CALL_SITE: 3>: {'a': 1}}
    """

    normalized: dict[OverrideSource, dict[str, Any]] = {}
    for source, values in (overrides or {}).items():
        normalized.setdefault(OverrideSource.parse(source), {}).update(values)
    return normalized
