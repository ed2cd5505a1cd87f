"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the resolution stages rely on so the
composition root can wire behaviour without depending on concrete
implementations.

Contents
--------
* :class:`LayerSource` – yields the variables one layer defines for a profile.
* :class:`ExpressionEvaluator` – renders a template against an environment.

System Role
-----------
The default adapters (:class:`~lib_layered_vars.adapters.layer_sources.structured.ProfileFileSource`
and :class:`~lib_layered_vars.adapters.evaluators.jinja.JinjaEvaluator`)
implement these protocols; tests and embedding applications substitute their
own.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from ..domain.model import LayerFile


@runtime_checkable
class LayerSource(Protocol):
    """Read the raw variable mapping a profile defines in one layer.

    Why
    ----
    Keep storage conventions (directories, file formats, the existence marker)
    out of the loading logic.
    """

    def load(self, profile: str, path: str) -> LayerFile:
        """Return the layer file for *profile* under *path*.

        Absence is reported through ``LayerFile.exists``; I/O problems raise
        :class:`OSError` and malformed content raises ``InvalidFormat``.
        """


@runtime_checkable
class ExpressionEvaluator(Protocol):
    """Render a template string against a name-to-value environment.

    Why
    ----
    The engine decides when and with which environment expressions run; the
    expression language itself is a replaceable collaborator.
    """

    def render(self, template: str, environment: Mapping[str, Any]) -> Any:
        """Return the rendered value.

        Raises ``UnresolvedReference`` for names missing from *environment* and
        ``ExpressionEvaluationError`` for every other failure.
        """
