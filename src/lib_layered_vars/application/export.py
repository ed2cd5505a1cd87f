"""Consumer prefixing and export naming.

Purpose
-------
Apply one naming rule to everything a resolution exports. With prefixing
enabled every eager name becomes ``{consumer_id}_{name}`` and the deferred
container is ``{consumer_id}_fp_deferred``; with prefixing disabled nothing is
renamed and the container is ``fp_deferred``. One resolution never mixes both
forms.

Prefixing happens before the eager merge, so the environment expressions are
rendered against already holds the exported names. Template authors reference
the prefixed form whenever prefixing is enabled.
"""

from __future__ import annotations

from typing import Any, Final, Mapping

from ..domain.errors import NameCollision
from ..domain.model import ConsumerContext, LayerFile

DEFERRED_CONTAINER: Final[str] = "fp_deferred"
"""Unprefixed name of the deferred container."""


def export_name(context: ConsumerContext, name: str) -> str:
    """Return the exported form of *name* for *context*.

    Examples
    --------
    >>> ctx = ConsumerContext("myapp", "UAT", {"UAT"}, "d", "skip", "skip", prefix_enabled=True)
    >>> export_name(ctx, "service_name")
    'myapp_service_name'
    """

    if not context.prefix_enabled:
        return name
    return f"{context.consumer_id}_{name}"


def container_name(context: ConsumerContext) -> str:
    """Return the exported name of the deferred container.

    Examples
    --------
    >>> ctx = ConsumerContext("myapp", "UAT", {"UAT"}, "d", "skip", "skip")
    >>> container_name(ctx)
    'fp_deferred'
    """

    return export_name(context, DEFERRED_CONTAINER)


def prefix_layer(context: ConsumerContext, layer_file: LayerFile) -> LayerFile:
    """Return *layer_file* with every variable renamed via :func:`export_name`."""

    if not context.prefix_enabled or not layer_file.variables:
        return layer_file
    renamed = {export_name(context, name): value for name, value in layer_file.variables.items()}
    return LayerFile(layer_file.exists, renamed, layer_file.path, layer_file.skipped)


def export(values: Mapping[str, Any], container: Any, name: str) -> dict[str, Any]:
    """Assemble the flat export ``{**values, name: container}``.

    Raises
    ------
    NameCollision
        An eager variable already uses the container name.
    """

    if name in values:
        raise NameCollision(f"Variable {name!r} collides with the deferred container name")
    exported = dict(values)
    exported[name] = container
    return exported
