"""Composition root for ``lib_layered_vars``.

Purpose
-------
Provide the single entry point that orchestrates profile selection, layer
loading, prefixing, the eager merge, deferred registration and export, while
emitting structured observability signals.

Contents
--------
* :func:`resolve` – resolve a :class:`ConsumerContext` into a :class:`Resolution`.
* :func:`resolve_mapping` – same, starting from a plain mapping of inputs.

System Role
-----------
Connects the default adapters (profile files, Jinja2) with the application
stages. It is the canonical place to change stage order or wire new adapters.
Each call is independent: no state survives between resolutions.
"""

from __future__ import annotations

from typing import Any, Mapping

from .adapters.evaluators.jinja import JinjaEvaluator
from .adapters.layer_sources.structured import ProfileFileSource
from .application.deferred import register_deferred
from .application.export import container_name, export, prefix_layer
from .application.layers import load_layers
from .application.merge import merge_eager
from .application.ports import ExpressionEvaluator, LayerSource
from .application.precedence import normalize_overrides
from .application.profiles import select_profile
from .domain.errors import ResolutionError
from .domain.model import ConsumerContext, Layer, OverrideSource
from .domain.resolution import Resolution
from .domain.variables import ResolvedVars
from .observability import log_error, log_info, trace_scope


def resolve(
    context: ConsumerContext,
    *,
    source: LayerSource | None = None,
    evaluator: ExpressionEvaluator | None = None,
    overrides: Mapping[OverrideSource | str, Mapping[str, Any]] | None = None,
    trace_id: str | None = None,
) -> Resolution:
    """Resolve the variables of *context* for its consumer.

    Why
    ----
    Consumers need one call that either yields a complete, consistent variable
    set or stops with a single structured error.

    What
    ----
    Selects the active profile, loads the three layers, prefixes names when
    enabled, merges defaults and instant values eagerly against the override
    chain, and registers deferred templates under the container name.

    Parameters
    ----------
    context:
        Resolution inputs.
    source:
        Layer source; defaults to :class:`ProfileFileSource`.
    evaluator:
        Expression evaluator for both instant and deferred layers; defaults to
        :class:`JinjaEvaluator`.
    overrides:
        External values grouped by :class:`OverrideSource` (or its name), keyed
        by exported variable names.
    trace_id:
        Identifier attached to every log record of this resolution.

    Raises
    ------
    ResolutionError
        One of ``InvalidProfile``, ``LayerLoadError``,
        ``ExpressionEvaluationError``, ``UnresolvedReference`` or
        ``NameCollision``. No partial result is ever returned.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> from pathlib import Path
    >>> tmp = TemporaryDirectory()
    >>> _ = (Path(tmp.name) / "RedHat-9.yml").write_text(
    ...     "fp_file_exists: true\\nservice_name: httpd\\nconfig_dir: /etc/httpd\\n", encoding="utf-8")
    >>> ctx = ConsumerContext("myapp", "RedHat-9", {"RedHat-9"}, tmp.name, "skip", "skip", prefix_enabled=True)
    >>> dict(resolve(ctx).variables)
    {'myapp_service_name': 'httpd', 'myapp_config_dir': '/etc/httpd'}
    >>> tmp.cleanup()
    """

    source = source or ProfileFileSource()
    evaluator = evaluator or JinjaEvaluator()
    with trace_scope(trace_id):
        try:
            return _resolve(context, source, evaluator, normalize_overrides(overrides))
        except ResolutionError as exc:
            log_error("resolution_failed", consumer=context.consumer_id, kind=exc.kind, error=str(exc))
            raise


def resolve_mapping(data: Mapping[str, Any], **kwargs: Any) -> Resolution:
    """Build a :class:`ConsumerContext` from *data* and :func:`resolve` it.

    Raises ``MissingRequiredInput`` listing every absent required field.
    """

    return resolve(ConsumerContext.from_mapping(data), **kwargs)


def _resolve(
    context: ConsumerContext,
    source: LayerSource,
    evaluator: ExpressionEvaluator,
    overrides: Mapping[OverrideSource, Mapping[str, Any]],
) -> Resolution:
    profile = select_profile(context.active_profile, context.profile_list, context.fallback_profile)
    layers = load_layers(profile, context, source)

    eager = merge_eager(
        prefix_layer(context, layers[Layer.DEFAULTS]),
        prefix_layer(context, layers[Layer.INSTANT]),
        overrides,
        evaluator,
    )
    name = container_name(context)
    deferred = register_deferred(layers[Layer.DEFERRED], name, evaluator)
    exported = export(eager.values, deferred, name)

    log_info(
        "resolution_complete",
        consumer=context.consumer_id,
        profile=profile,
        exported=len(exported),
        deferred=len(deferred),
        overridden=sorted(eager.overridden),
    )
    return Resolution(
        profile=profile,
        variables=ResolvedVars(eager.values, eager.provenance),
        deferred=deferred,
        overridden=eager.overridden,
        layers=layers,
        environment=eager.environment,
    )


__all__ = ["resolve", "resolve_mapping"]
