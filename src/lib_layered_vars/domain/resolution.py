"""Result of one successful resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .deferred import DeferredContainer
from .model import Layer, LayerFile, OverrideSource
from .variables import ResolvedVars


@dataclass(frozen=True, slots=True)
class Resolution:
    """Everything a consumer receives from a resolution.

    Attributes
    ----------
    profile:
        The single active profile the layers were loaded for.
    variables:
        Eager variables under their exported names, with provenance.
    deferred:
        Container of unevaluated bindings; its ``name`` is the export name.
    overridden:
        Exported names whose value came from an external override source.
    layers:
        The layer files as loaded (before prefixing), for diagnostics.
    environment:
        Eager variables plus override-only names: the environment the instant
        layer was rendered against. A starting point for deferred access.
    """

    profile: str
    variables: ResolvedVars
    deferred: DeferredContainer
    overridden: Mapping[str, OverrideSource] = field(default_factory=dict)
    layers: Mapping[Layer, LayerFile] = field(default_factory=dict)
    environment: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "overridden", MappingProxyType(dict(self.overridden)))
        object.__setattr__(self, "layers", MappingProxyType(dict(self.layers)))
        object.__setattr__(self, "environment", MappingProxyType(dict(self.environment)))

    @property
    def container_name(self) -> str:
        return self.deferred.name

    def exported(self) -> dict[str, Any]:
        """Return the flat export: eager variables plus the deferred container."""

        exported: dict[str, Any] = dict(self.variables)
        exported[self.deferred.name] = self.deferred
        return exported

    def live_environment(self, updates: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Return a fresh copy of :attr:`environment` with *updates* applied.

        The copy belongs to the caller; the resolution itself never changes.
        """

        live = dict(self.environment)
        live.update(updates or {})
        return live

    def render(self, key: str, environment: Mapping[str, Any]) -> Any:
        """Render deferred entry *key* against the caller-supplied *environment*."""

        return self.deferred.render(key, environment)
