"""Parse ``--set KEY=VALUE`` assignments and override files for the CLI.

Values are coerced as JSON literals (``true``, ``42``, ``[1, 2]``, ``null``)
and fall back to the raw string, so ``--set db_host=db3`` stays a string.
Floats are kept only when they print back unchanged, so version numbers such
as ``2.10`` stay strings.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from ..domain.errors import InvalidFormat, NotFound
from .layer_sources.structured import load_mapping


def coerce_value(raw: str) -> Any:
    """Coerce a raw CLI value, keeping the string when it is not valid JSON.

    Examples
    --------
    >>> coerce_value("true"), coerce_value("8080"), coerce_value("db3"), coerce_value("")
    (True, 8080, 'db3', '')
    >>> coerce_value('["a", "b"]')
    ['a', 'b']
    >>> coerce_value("2.3"), coerce_value("2.10")
    (2.3, '2.10')
    """

    if raw == "":
        return ""
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(value, float) and str(value) != raw.strip():
        return raw
    return value


def parse_assignment(raw: str) -> tuple[str, Any]:
    """Split ``KEY=VALUE`` into the key and its coerced value.

    Examples
    --------
    >>> parse_assignment("app_version=2.3")
    ('app_version', 2.3)
    >>> parse_assignment("motd=a=b")
    ('motd', 'a=b')
    >>> parse_assignment("novalue")
    Traceback (most recent call last):
    ...
    ValueError: Invalid assignment 'novalue': expected KEY=VALUE
    """

    if "=" not in raw:
        raise ValueError(f"Invalid assignment {raw!r}: expected KEY=VALUE")
    key, value = raw.split("=", maxsplit=1)
    key = key.strip()
    if not key:
        raise ValueError(f"Invalid assignment {raw!r}: key is empty")
    return key, coerce_value(value)


def parse_assignments(values: Iterable[str]) -> dict[str, Any]:
    """Parse repeated assignments; later ones win."""

    return dict(parse_assignment(raw) for raw in values)


def load_override_file(path: str) -> Mapping[str, Any]:
    """Read a flat override mapping from a YAML, JSON or TOML file.

    Unlike layer files, override files carry no existence marker, and a missing
    file is an error because the operator named it explicitly.
    """

    try:
        return load_mapping(path)
    except NotFound as exc:
        raise InvalidFormat(f"Override file not found: {path}") from exc
