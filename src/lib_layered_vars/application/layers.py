"""Layer loading for the resolved profile.

Purpose
-------
Materialise the defaults, instant and deferred layers of one profile while
honouring per-layer skip configuration and translating collaborator failures
into :class:`LayerLoadError`.

Contents
--------
* :func:`load_layers` – load all three layers in order.
* :func:`load_layer` – load a single layer.
"""

from __future__ import annotations

from ..domain.errors import LayerLoadError, NotFound
from ..domain.model import SKIP_LAYER, ConsumerContext, Layer, LayerFile
from ..observability import log_debug, log_error, make_event
from .ports import LayerSource


def load_layers(profile: str, context: ConsumerContext, source: LayerSource) -> dict[Layer, LayerFile]:
    """Return the :class:`LayerFile` of every layer for *profile*, in load order.

    Examples
    --------
    >>> class Memory:
    ...     def load(self, profile, path):
    ...         return LayerFile.present({"service_name": "httpd"}, path=f"{path}/{profile}.yml")
    >>> ctx = ConsumerContext("myapp", "RedHat-9", {"RedHat-9"}, "defaults", "skip", "skip")
    >>> layers = load_layers("RedHat-9", ctx, Memory())
    >>> dict(layers[Layer.DEFAULTS].variables), layers[Layer.INSTANT].skipped
    ({'service_name': 'httpd'}, True)
    """

    return {layer: load_layer(profile, layer, context.layer_path(layer), source) for layer in Layer}


def load_layer(profile: str, layer: Layer, path: str, source: LayerSource) -> LayerFile:
    """Load one layer, never calling *source* for a skipped layer.

    Why
    ----
    A profile may omit a layer gracefully, but a broken layer must stop the
    resolution with the layer and path that caused it.

    Raises
    ------
    LayerLoadError
        *source* failed for any reason other than :class:`NotFound`, which
        means the profile has no data for the layer.
    """

    if path == SKIP_LAYER:
        log_debug("layer_skipped", **make_event(layer.value, None))
        return LayerFile.skip()
    try:
        loaded = source.load(profile, path)
    except NotFound:
        loaded = LayerFile.absent(path)
    except LayerLoadError:
        raise
    except Exception as exc:  # noqa: BLE001 - any collaborator failure stops the resolution
        log_error("layer_error", **make_event(layer.value, path, {"profile": profile, "error": str(exc)}))
        raise LayerLoadError(layer.value, path, str(exc)) from exc
    if not loaded.exists:
        log_debug("layer_absent", **make_event(layer.value, loaded.path or path, {"profile": profile}))
        return LayerFile.absent(loaded.path or path)
    log_debug("layer_loaded", **make_event(layer.value, loaded.path, {"profile": profile, "keys": len(loaded.variables)}))
    return loaded
