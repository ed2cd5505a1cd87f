"""Immutable mapping of eagerly resolved variables.

Purpose
-------
Carry the eager result of a resolution (names already prefixed when prefixing
is enabled) together with per-key provenance. The type contains no I/O.

Contents
--------
* :class:`SourceInfo` – typed metadata describing where a variable came from.
* :class:`ResolvedVars` – ``Mapping`` implementation with provenance lookups.
* :func:`_deepcopy_mapping` / :func:`_deepcopy_value` – clone helpers that keep
  ``mappingproxy`` payloads copyable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, TypedDict


class SourceInfo(TypedDict):
    """Describe the origin of a resolved variable.

    Attributes
    ----------
    layer:
        ``"defaults"``, ``"instant"``, or the lower-case name of the
        :class:`~lib_layered_vars.domain.model.OverrideSource` that won.
    path:
        Layer file that produced the value; ``None`` for override sources.
    key:
        Exported variable name.
    """

    layer: str
    path: str | None
    key: str


@dataclass(frozen=True, slots=True)
class ResolvedVars(Mapping[str, Any]):
    """Read-only mapping of exported eager variables.

    Examples
    --------
    >>> resolved = ResolvedVars(
    ...     {"myapp_service_name": "httpd"},
    ...     {"myapp_service_name": {"layer": "defaults", "path": "/d/RedHat-9.yml", "key": "myapp_service_name"}},
    ... )
    >>> resolved["myapp_service_name"]
    'httpd'
    >>> resolved.origin("myapp_service_name")["layer"]
    'defaults'
    """

    _data: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_data", _freeze_mapping(self._data))
        object.__setattr__(self, "_meta", _freeze_mapping(self._meta))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def as_dict(self) -> dict[str, Any]:
        """Return a deep, mutable ``dict`` copy of the variables.

        Examples
        --------
        >>> resolved = ResolvedVars({"ports": [80, 443]}, {})
        >>> clone = resolved.as_dict()
        >>> clone["ports"].append(8080)
        >>> resolved["ports"]
        [80, 443]
        """

        return _deepcopy_mapping(self._data)

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for *key* or ``None`` when it was not resolved."""

        return self._meta.get(key)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return a copy of the provenance table keyed by exported name."""

        return {key: SourceInfo(**value) for key, value in self._meta.items()}


def _freeze_mapping(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return an immutable proxy around *mapping*."""

    return MappingProxyType(dict(mapping))


def _deepcopy_mapping(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively clone a mapping so callers receive a mutable copy.

    ``copy.deepcopy`` cannot clone ``mappingproxy`` objects, which layer files
    hand out for their variables.

    Examples
    --------
    >>> _deepcopy_mapping(MappingProxyType({"a": {"b": 1}}))["a"]["b"]
    1
    """

    result: dict[str, Any] = {}
    for key, value in mapping.items():
        result[key] = _deepcopy_value(value)
    return result


def _deepcopy_value(value: Any) -> Any:
    """Clone nested values while preserving container types where practical.

    Examples
    --------
    >>> _deepcopy_value({"nested": [1, 2]})
    {'nested': [1, 2]}
    >>> _deepcopy_value(("a", "b"))
    ('a', 'b')
    """

    if isinstance(value, Mapping):
        return _deepcopy_mapping(value)
    if isinstance(value, list):
        return [_deepcopy_value(item) for item in value]
    if isinstance(value, (set, tuple)):
        iterable = [_deepcopy_value(item) for item in value]
        return type(value)(iterable)
    return value

