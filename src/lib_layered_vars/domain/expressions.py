"""Invoke an expression evaluator and attribute its failures to a variable.

The evaluator itself is a collaborator behind
:class:`lib_layered_vars.application.ports.ExpressionEvaluator`. This module
only decides which parts of a value are templates and re-raises evaluator
errors with the variable name and layer attached.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import ExpressionEvaluationError, UnresolvedReference

if TYPE_CHECKING:  # pragma: no cover
    from ..application.ports import ExpressionEvaluator


def render_value(
    evaluator: ExpressionEvaluator,
    value: Any,
    environment: Mapping[str, Any],
    *,
    key: str,
    layer: str,
) -> Any:
    """Render every string inside *value* against *environment*.

    Strings are templates; lists, tuples and mappings are walked recursively;
    any other scalar is returned unchanged without calling the evaluator.

    Raises
    ------
    UnresolvedReference
        The evaluator reported a name missing from *environment*.
    ExpressionEvaluationError
        Any other evaluator failure.
    """

    try:
        return _render(evaluator, value, environment)
    except UnresolvedReference as exc:
        raise UnresolvedReference(exc.name, key=key, layer=layer) from exc
    except ExpressionEvaluationError as exc:
        raise ExpressionEvaluationError(exc.detail, key=key, layer=layer) from exc


def _render(evaluator: ExpressionEvaluator, value: Any, environment: Mapping[str, Any]) -> Any:
    if isinstance(value, str):
        return evaluator.render(value, environment)
    if isinstance(value, Mapping):
        return {name: _render(evaluator, item, environment) for name, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_render(evaluator, item, environment) for item in value)
    return value
