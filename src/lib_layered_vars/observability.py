"""Structured logging for profile resolution.

The package logs through one stdlib logger, ``lib_layered_vars``, which carries
a ``NullHandler`` so nothing is printed unless the application configures
logging. Every record has ``extra={"context": {...}}`` holding the active trace
id plus event fields such as ``layer``, ``path``, ``profile`` or ``key``.

Events by stage:

* profiles: ``profile_selected``, ``profile_fallback``
* layers: ``layer_skipped``, ``layer_absent``, ``layer_loaded``, ``layer_error``
* profile files: ``layer_file_read``, ``layer_file_loaded``,
  ``layer_file_missing``, ``layer_file_unmarked``, ``layer_file_invalid``
* eager merge: ``override_applied``, ``instant_evaluated``
* deferred layer: ``deferred_registered``
* resolution: ``resolution_complete``, ``resolution_failed``
* cache: ``resolution_cache_hit``, ``resolution_cache_invalidated``

The trace id lives in a :class:`ContextVar`; :func:`trace_scope` binds it for
the duration of one resolution so concurrent resolutions never share it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_layered_vars_trace_id", default=None)
"""Current trace identifier propagated through logging helpers."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_layered_vars")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def trace_scope(trace_id: str | None) -> Iterator[None]:
    """Bind *trace_id* for the enclosed block, then restore the previous value.

    Examples
    --------
    >>> with trace_scope("resolve-1"):
    ...     TRACE_ID.get()
    'resolve-1'
    >>> TRACE_ID.get() is None
    True
    """

    token = TRACE_ID.set(trace_id)
    try:
        yield
    finally:
        TRACE_ID.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    """Per-item progress: layer files, overrides, instant keys, cache hits."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Stage outcomes: selected profile, completed resolution."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Failures that stop a resolution."""

    _emit(logging.ERROR, message, fields)


def make_event(
    layer: str,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the fields shared by layer events: layer name and file path.

    Examples
    --------
    >>> make_event('defaults', '/srv/vars/defaults', {'keys': 3})
    {'layer': 'defaults', 'path': '/srv/vars/defaults', 'keys': 3}
    """

    event: dict[str, Any] = {"layer": layer, "path": path}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current trace identifier to the provided structured fields."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
