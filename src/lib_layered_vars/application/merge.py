"""Eager merge engine.

Purpose
-------
Build the eager environment of a resolution: plain defaults first, external
overrides by strict precedence, then instant expressions rendered immediately
against everything resolved so far. Free of I/O so it can be reused by other
composition roots.

Contents
    - ``merge_eager``: public entry point.
    - ``EagerResult``: values, provenance, override notes and the evaluation
      environment.
    - ``_set_value`` / ``_apply_override``: tiny helpers that narrate how
      provenance changes when a value is replaced.

System Role
-----------
Receives prefixed layer files from :mod:`lib_layered_vars.core` and returns the
mapping that becomes :class:`~lib_layered_vars.domain.variables.ResolvedVars`.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from ..domain.expressions import render_value
from ..domain.model import Layer, LayerFile, OverrideSource
from ..observability import log_debug
from .ports import ExpressionEvaluator
from .precedence import Overrides, flatten_overrides, winning_override


@dataclass(slots=True)
class EagerResult:
    """Outcome of the eager phase.

    Attributes
    ----------
    values:
        Variables defined by the profile (defaults, instant, profile-default
        seeds) with their final values.
    provenance:
        ``{"layer", "path", "key"}`` for every entry of ``values``.
    overridden:
        Names whose final value came from an external override, and from which
        source.
    environment:
        ``values`` plus every override-only name; the environment instant
        expressions were rendered against.
    """

    values: dict[str, Any] = field(default_factory=dict)
    provenance: dict[str, dict[str, Any]] = field(default_factory=dict)
    overridden: dict[str, OverrideSource] = field(default_factory=dict)
    environment: dict[str, Any] = field(default_factory=dict)


def merge_eager(
    defaults: LayerFile,
    instant: LayerFile,
    overrides: Overrides,
    evaluator: ExpressionEvaluator,
) -> EagerResult:
    """Merge *defaults* and *instant* honouring override precedence.

    What
    ----
    1. Seed ``PROFILE_DEFAULT`` override values, then merge the defaults layer
       verbatim (no evaluation).
    2. Replace every name also supplied by ``INVENTORY``, ``CALLER_SCOPE`` or
       ``CALL_SITE`` with the highest-ranked value.
    3. Render each instant variable in file order against the environment built
       so far, so later instant variables see earlier ones. A name an external
       source overrides keeps the override and its template is not rendered.

    Raises
    ------
    UnresolvedReference
        An instant expression names a variable absent from the environment.
    ExpressionEvaluationError
        Any other evaluator failure. Never retried.

    Examples
    --------
    >>> class Format:
    ...     def render(self, template, environment):
    ...         return template.format(**environment)
    >>> result = merge_eager(
    ...     LayerFile.present({"api_server": "prod.example.com"}),
    ...     LayerFile.present({"api_endpoint": "https://{api_server}/v1/data"}),
    ...     {},
    ...     Format(),
    ... )
    >>> result.values["api_endpoint"]
    'https://prod.example.com/v1/data'
    """

    result = EagerResult()
    for key, value in overrides.get(OverrideSource.PROFILE_DEFAULT, {}).items():
        _set_value(result, key, value, "profile_default", None)
    for key, value in defaults.variables.items():
        _set_value(result, key, value, Layer.DEFAULTS.value, defaults.path)
    for key in list(result.values):
        _apply_override(result, key, overrides)

    result.environment = {**flatten_overrides(overrides), **result.values}

    for key, template in instant.variables.items():
        if _apply_override(result, key, overrides):
            result.environment[key] = result.values[key]
            continue
        rendered = render_value(evaluator, deepcopy(template), result.environment, key=key, layer=Layer.INSTANT.value)
        _set_value(result, key, rendered, Layer.INSTANT.value, instant.path)
        result.environment[key] = rendered
        log_debug("instant_evaluated", layer=Layer.INSTANT.value, path=instant.path, key=key)
    return result


def _apply_override(result: EagerResult, key: str, overrides: Overrides) -> bool:
    """Replace *key* with the winning external override, if any."""

    winner = winning_override(key, overrides)
    if winner is None:
        return False
    source, value = winner
    _set_value(result, key, value, source.name.lower(), None)
    result.overridden[key] = source
    log_debug("override_applied", layer=source.name.lower(), path=None, key=key)
    return True


def _set_value(result: EagerResult, key: str, value: Any, layer: str, path: str | None) -> None:
    """Assign a value and record which layer produced it."""

    result.values[key] = deepcopy(value)
    result.provenance[key] = {"layer": layer, "path": path, "key": key}
