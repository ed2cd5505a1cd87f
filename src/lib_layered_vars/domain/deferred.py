"""Deferred variables: templates stored as data and rendered on every access.

Purpose
-------
Represent the deferred layer of a resolution. A :class:`DeferredVar` keeps the
raw template and the evaluator reference; rendering it always uses the
environment the caller passes at access time, so changes made after resolution
(for example a later override of an input) are reflected.

Contents
--------
* :class:`DeferredVar` – one unevaluated binding.
* :class:`DeferredContainer` – read-only mapping of bindings exported under a
  single namespaced name.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from .expressions import render_value
from .model import Layer

if TYPE_CHECKING:  # pragma: no cover
    from ..application.ports import ExpressionEvaluator


@dataclass(frozen=True, slots=True)
class DeferredVar:
    """An unevaluated template bound to the evaluator that will render it.

    Rendering is never cached: two calls with different environments return
    different results when the template depends on the changed names.
    """

    name: str
    template: Any
    evaluator: ExpressionEvaluator

    def render(self, environment: Mapping[str, Any]) -> Any:
        """Render the template against the caller's current *environment*."""

        return render_value(
            self.evaluator,
            self.template,
            environment,
            key=self.name,
            layer=Layer.DEFERRED.value,
        )


@dataclass(frozen=True, slots=True)
class DeferredContainer(MappingABC[str, DeferredVar]):
    """Namespaced, read-only collection of deferred bindings.

    Why
    ----
    Consumers find every deferred variable of one resolution under a single,
    predictable export name (``fp_deferred`` or ``{consumer}_fp_deferred``).

    Examples
    --------
    >>> class Upper:
    ...     def render(self, template, environment):
    ...         return template.format(**environment).upper()
    >>> box = DeferredContainer("fp_deferred", {"greeting": DeferredVar("greeting", "hi {who}", Upper())})
    >>> box.templates()
    {'greeting': 'hi {who}'}
    >>> box.render("greeting", {"who": "ops"})
    'HI OPS'
    """

    name: str
    _bindings: Mapping[str, DeferredVar]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_bindings", MappingProxyType(dict(self._bindings)))

    def __getitem__(self, key: str) -> DeferredVar:
        return self._bindings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def templates(self) -> dict[str, Any]:
        """Return the raw, unevaluated templates keyed by variable name."""

        return {key: binding.template for key, binding in self._bindings.items()}

    def render(self, key: str, environment: Mapping[str, Any]) -> Any:
        """Render the binding stored under *key* against *environment*."""

        return self._bindings[key].render(environment)

    def render_all(self, environment: Mapping[str, Any]) -> dict[str, Any]:
        """Render every binding against the same *environment*.

        The first failing binding aborts the call with its structured error.
        """

        return {key: binding.render(environment) for key, binding in self._bindings.items()}
