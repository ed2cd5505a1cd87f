"""Public package surface for ``lib_layered_vars``.

Resolve profile-specific variables from three layers (defaults, instant,
deferred), apply the override precedence chain and optional consumer
prefixing, and hand back eager values plus deferred bindings rendered on
access.
"""

from __future__ import annotations

from .adapters.evaluators.jinja import JinjaEvaluator
from .adapters.layer_sources.structured import ProfileFileSource
from .application.cache import ResolutionCache
from .application.ports import ExpressionEvaluator, LayerSource
from .application.profiles import profile_candidate, select_profile
from .core import resolve, resolve_mapping
from .domain.deferred import DeferredContainer, DeferredVar
from .domain.errors import (
    ExpressionEvaluationError,
    InvalidFormat,
    InvalidProfile,
    LayerLoadError,
    MissingRequiredInput,
    NameCollision,
    NotFound,
    ResolutionError,
    UnresolvedReference,
)
from .domain.model import EXISTENCE_MARKER, SKIP_LAYER, ConsumerContext, Layer, LayerFile, OverrideSource
from .domain.resolution import Resolution
from .domain.variables import ResolvedVars, SourceInfo
from .observability import bind_trace_id, get_logger

__all__ = [
    "EXISTENCE_MARKER",
    "SKIP_LAYER",
    "ConsumerContext",
    "DeferredContainer",
    "DeferredVar",
    "ExpressionEvaluationError",
    "ExpressionEvaluator",
    "InvalidFormat",
    "InvalidProfile",
    "JinjaEvaluator",
    "Layer",
    "LayerFile",
    "LayerLoadError",
    "LayerSource",
    "MissingRequiredInput",
    "NameCollision",
    "NotFound",
    "OverrideSource",
    "ProfileFileSource",
    "Resolution",
    "ResolutionCache",
    "ResolutionError",
    "ResolvedVars",
    "SourceInfo",
    "UnresolvedReference",
    "bind_trace_id",
    "get_logger",
    "profile_candidate",
    "resolve",
    "resolve_mapping",
    "select_profile",
]
