"""Jinja2-backed expression evaluator.

Purpose
-------
Default implementation of
:class:`lib_layered_vars.application.ports.ExpressionEvaluator`. Templates use
``{{ name }}`` syntax; undefined names are strict errors so a prefixing mismatch
surfaces as :class:`UnresolvedReference` instead of an empty string. Rendering
happens in an immutable sandbox, so a template cannot change the values it
reads.
Rendering rules
---------------
* Strings without Jinja markers are returned unchanged.
* A template that is exactly one reference to a defined name (``"{{ port }}"``)
  returns a copy of that value, keeping its type. Other single-word templates
  such as ``"{{ true }}"`` render normally.
* Anything else renders to a string.
"""

from __future__ import annotations

import re
from copy import deepcopy
from typing import Any, Final, Mapping

from jinja2 import Environment, StrictUndefined
from jinja2.exceptions import UndefinedError
from jinja2.sandbox import ImmutableSandboxedEnvironment

from ...domain.errors import ExpressionEvaluationError, UnresolvedReference

JINJA_MARKERS: Final[tuple[str, ...]] = ("{{", "{%", "{#")

_FULL_VAR_RE = re.compile(r"^\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}$")
_UNDEFINED_NAME_RE = re.compile(r"'([^']+)' is undefined")


class JinjaEvaluator:
    """Render templates with a strict Jinja2 environment.

    Examples
    --------
    >>> evaluator = JinjaEvaluator()
    >>> evaluator.render("https://{{ api_server }}/v1/data", {"api_server": "prod.example.com"})
    'https://prod.example.com/v1/data'
    >>> evaluator.render("{{ port }}", {"port": 8080})
    8080
    >>> evaluator.render("{{ true }}", {})
    'True'
    >>> evaluator.render("plain text", {})
    'plain text'
    >>> evaluator.render("{{ missing }}", {})
    Traceback (most recent call last):
    ...
    lib_layered_vars.domain.errors.UnresolvedReference: Expression references 'missing'
    """

    def __init__(self, environment: Environment | None = None) -> None:
        self._env = environment or ImmutableSandboxedEnvironment(
            undefined=StrictUndefined, keep_trailing_newline=True
        )

    def render(self, template: str, environment: Mapping[str, Any]) -> Any:
        if not any(marker in template for marker in JINJA_MARKERS):
            return template
        full = _FULL_VAR_RE.match(template)
        if full and full.group(1) in environment:
            return deepcopy(environment[full.group(1)])
        try:
            return self._env.from_string(template).render(dict(environment))
        except UndefinedError as exc:
            match = _UNDEFINED_NAME_RE.search(str(exc))
            raise UnresolvedReference(match.group(1) if match else None) from exc
        except Exception as exc:  # noqa: BLE001 - template code may raise anything
            raise ExpressionEvaluationError(f"{type(exc).__name__}: {exc}") from exc
