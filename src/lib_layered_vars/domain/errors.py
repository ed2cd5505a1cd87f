"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the resolution stages, and
consuming applications. The hierarchy lives in the domain layer so outer layers
depend on it and never the other way round.

Contents
--------
* :class:`ResolutionError` – umbrella base class carrying a stable ``kind``.
* :class:`InvalidProfile` – candidate profile rejected and no fallback applies.
* :class:`LayerLoadError` – a layer source failed (I/O or malformed file).
* :class:`ExpressionEvaluationError` – an expression failed to render.
* :class:`UnresolvedReference` – an expression named an absent variable.
* :class:`MissingRequiredInput` – required resolution inputs were not supplied.
* :class:`NameCollision` – an exported name clashes with the deferred container.
* :class:`InvalidFormat` / :class:`NotFound` – adapter-level signals translated
  by the layer loader.

System Role
-----------
A resolution either succeeds completely or fails with exactly one of these
errors. Callers catch :class:`ResolutionError` to handle every failure of the
engine uniformly and inspect ``kind`` for structured reporting.
"""

from __future__ import annotations

from typing import ClassVar, Iterable


class ResolutionError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_vars``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling, plus a machine-readable ``kind`` for structured reporting.
    """

    kind: ClassVar[str] = "ResolutionError"


class InvalidFormat(ResolutionError):
    """Raised when a layer artifact cannot be parsed into a flat variable mapping.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`) and the
    existence-marker validation in the profile file source.
    """

    kind = "InvalidFormat"


class NotFound(ResolutionError):
    """Represents a missing-but-optional resource such as an absent layer file.

    The layer loader treats this as "no data for this profile", never as fatal.
    """

    kind = "NotFound"


class InvalidProfile(ResolutionError):
    """Raised when the candidate profile is not permitted and no fallback applies.

    Examples
    --------
    >>> str(InvalidProfile("UNKNOWN", ["UAT", "PROD"]))
    "Profile 'UNKNOWN' is not one of the permitted profiles: PROD, UAT"
    """

    kind = "InvalidProfile"

    def __init__(self, candidate: str, permitted: Iterable[str], *, reason: str | None = None) -> None:
        self.candidate = candidate
        self.permitted = tuple(sorted(permitted))
        message = f"Profile {candidate!r} is not one of the permitted profiles: {', '.join(self.permitted)}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class LayerLoadError(ResolutionError):
    """Raised when a configuration layer cannot be materialised.

    Why
    ----
    The loader needs to surface adapter failures using the domain error
    taxonomy so callers can catch a single exception family.

    What
    -----
    Wraps :class:`InvalidFormat`, :class:`OSError`, or other adapter failures
    with the layer name and path that produced them.
    """

    kind = "LayerLoadError"

    def __init__(self, layer: str, path: str | None, detail: str) -> None:
        self.layer = layer
        self.path = path
        super().__init__(f"Failed to load {layer} layer from {path}: {detail}")


class ExpressionEvaluationError(ResolutionError):
    """Raised when an expression fails to render for a given variable.

    ``key`` and ``layer`` are ``None`` when the evaluator raises on its own; the
    merge engine and deferred bindings re-raise with both populated.
    """

    kind = "ExpressionEvaluationError"

    def __init__(self, detail: str, *, key: str | None = None, layer: str | None = None) -> None:
        self.detail = detail
        self.key = key
        self.layer = layer
        if key is None:
            super().__init__(detail)
        else:
            super().__init__(f"Failed to evaluate {layer} variable {key!r}: {detail}")


class UnresolvedReference(ResolutionError):
    """Raised when an expression references a name absent from its environment.

    The most common cause is a prefixing mismatch: templates must reference the
    prefixed names when prefixing is enabled.
    """

    kind = "UnresolvedReference"

    def __init__(self, name: str | None, *, key: str | None = None, layer: str | None = None) -> None:
        self.name = name
        self.key = key
        self.layer = layer
        target = repr(name) if name else "an undefined variable"
        if key is None:
            super().__init__(f"Expression references {target}")
        else:
            super().__init__(f"{layer} variable {key!r} references {target}, which is not defined")


class MissingRequiredInput(ResolutionError):
    """Raised when required resolution inputs are absent at resolution start."""

    kind = "MissingRequiredInput"

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(f"Missing required input: {', '.join(self.fields)}")


class NameCollision(ResolutionError):
    """Raised when an exported variable name equals the deferred container name."""

    kind = "NameCollision"
