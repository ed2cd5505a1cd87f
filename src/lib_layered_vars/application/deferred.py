"""Deferred registry.

Wrap every deferred-layer variable as an unevaluated binding inside one
namespaced container. Nothing is rendered here; rendering happens when the
consumer reads an entry, against the environment it supplies at that moment.
"""

from __future__ import annotations

from ..domain.deferred import DeferredContainer, DeferredVar
from ..domain.model import Layer, LayerFile
from ..observability import log_debug, make_event
from .ports import ExpressionEvaluator


def register_deferred(layer_file: LayerFile, container_name: str, evaluator: ExpressionEvaluator) -> DeferredContainer:
    """Return a container holding the raw templates of *layer_file*.

    Examples
    --------
    >>> class Never:
    ...     def render(self, template, environment):
    ...         raise AssertionError("rendered during registration")
    >>> box = register_deferred(
    ...     LayerFile.present({"welcome_message": "Welcome, version {{app_version}}"}),
    ...     "myapp_fp_deferred",
    ...     Never(),
    ... )
    >>> box.name, box.templates()
    ('myapp_fp_deferred', {'welcome_message': 'Welcome, version {{app_version}}'})
    """

    bindings = {
        name: DeferredVar(name, template, evaluator)
        for name, template in layer_file.variables.items()
    }
    log_debug(
        "deferred_registered",
        **make_event(Layer.DEFERRED.value, layer_file.path, {"container": container_name, "keys": sorted(bindings)}),
    )
    return DeferredContainer(container_name, bindings)
