"""Domain value objects describing one resolution request.

Purpose
-------
Hold the typed inputs and intermediate artifacts that flow between the
resolution stages. Nothing in this module performs I/O; every object is created
fresh for a single resolution and discarded afterwards.

Contents
--------
* :data:`SKIP_LAYER` – sentinel path meaning "do not load this layer".
* :data:`EXISTENCE_MARKER` – field every layer file must carry to count as data.
* :class:`Layer` – the three variable layers in load order.
* :class:`OverrideSource` – external override sources ordered by precedence.
* :class:`LayerFile` – one (profile, layer) payload plus its existence flag.
* :class:`ConsumerContext` – immutable resolution inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Final, Iterable

from .errors import InvalidFormat, MissingRequiredInput

SKIP_LAYER: Final[str] = "skip"
"""Layer path value that disables a layer entirely."""

EXISTENCE_MARKER: Final[str] = "fp_file_exists"
"""Boolean field distinguishing "present but empty" files from "no data"."""


class Layer(str, Enum):
    """Variable layers, listed in the order they are loaded."""

    DEFAULTS = "defaults"
    INSTANT = "instant"
    DEFERRED = "deferred"


class OverrideSource(IntEnum):
    """External sources that may supply a value for any variable name.

    The integer value is the precedence rank: higher values win outright.

    Examples
    --------
    >>> OverrideSource.CALL_SITE > OverrideSource.INVENTORY
    True
    >>> OverrideSource.parse("caller-scope")
    <OverrideSource.CALLER_SCOPE: 2>
    """

    PROFILE_DEFAULT = 0
    INVENTORY = 1
    CALLER_SCOPE = 2
    CALL_SITE = 3

    @classmethod
    def parse(cls, value: str | OverrideSource) -> OverrideSource:
        """Accept enum members or their names in snake, kebab, or upper case.

        Raises :class:`InvalidFormat` naming the permitted sources for anything else.
        """

        if isinstance(value, OverrideSource):
            return value
        try:
            return cls[str(value).strip().replace("-", "_").upper()]
        except KeyError:
            permitted = ", ".join(member.name.lower() for member in cls)
            raise InvalidFormat(f"Unknown override source {value!r}; expected one of: {permitted}") from None


@dataclass(frozen=True, slots=True)
class LayerFile:
    """Variables one layer defines for one profile.

    ``exists`` is ``False`` when the profile has no data for the layer; a file
    that is present but declares no variables keeps ``exists=True`` with an
    empty mapping. ``skipped`` marks layers disabled through :data:`SKIP_LAYER`.

    Examples
    --------
    >>> LayerFile.absent("/srv/defaults").variables
    mappingproxy({})
    >>> LayerFile.present({"a": 1}, path="x.yml").exists
    True
    """

    exists: bool
    variables: Mapping[str, Any] = field(default_factory=dict)
    path: str | None = None
    skipped: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    @classmethod
    def present(cls, variables: Mapping[str, Any], *, path: str | None = None) -> LayerFile:
        return cls(True, variables, path)

    @classmethod
    def absent(cls, path: str | None = None) -> LayerFile:
        return cls(False, {}, path)

    @classmethod
    def skip(cls) -> LayerFile:
        return cls(False, {}, SKIP_LAYER, skipped=True)


_REQUIRED_FIELDS: Final[tuple[str, ...]] = (
    "consumer_id",
    "active_profile",
    "profile_list",
    "defaults_path",
    "instant_path",
    "deferred_path",
)


@dataclass(frozen=True, slots=True)
class ConsumerContext:
    """Inputs for one resolution; immutable for its whole duration.

    Why
    ----
    Every stage receives its configuration explicitly instead of looking it up
    from ambient state.

    Attributes
    ----------
    consumer_id:
        Identifier of the consuming application; used as the naming prefix.
    active_profile:
        Candidate profile, possibly derived from host facts by the caller.
    profile_list:
        Permitted profile identifiers.
    defaults_path / instant_path / deferred_path:
        Layer directories or :data:`SKIP_LAYER`.
    prefix_enabled:
        Whether exported names carry ``{consumer_id}_``.
    fallback_profile:
        Profile used when the candidate is not permitted.
    """

    consumer_id: str
    active_profile: str
    profile_list: frozenset[str]
    defaults_path: str
    instant_path: str
    deferred_path: str
    prefix_enabled: bool = False
    fallback_profile: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "profile_list", frozenset(_as_strings(self.profile_list or ())))
        missing = [name for name in _REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise MissingRequiredInput(missing)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ConsumerContext:
        """Build a context from a plain mapping (parsed TOML/YAML/JSON, CLI input).

        Examples
        --------
        >>> ctx = ConsumerContext.from_mapping({
        ...     "consumer_id": "myapp", "active_profile": "UAT", "profile_list": ["UAT"],
        ...     "defaults_path": "d", "instant_path": "skip", "deferred_path": "skip",
        ... })
        >>> ctx.layer_path(Layer.INSTANT)
        'skip'
        >>> ConsumerContext.from_mapping({"consumer_id": "myapp"})
        Traceback (most recent call last):
        ...
        lib_layered_vars.domain.errors.MissingRequiredInput: Missing required input: active_profile, profile_list, defaults_path, instant_path, deferred_path
        """

        missing = [name for name in _REQUIRED_FIELDS if data.get(name) in (None, "", [], (), set(), frozenset())]
        if missing:
            raise MissingRequiredInput(missing)
        return cls(
            consumer_id=str(data["consumer_id"]),
            active_profile=str(data["active_profile"]),
            profile_list=frozenset(_as_strings(data["profile_list"])),
            defaults_path=str(data["defaults_path"]),
            instant_path=str(data["instant_path"]),
            deferred_path=str(data["deferred_path"]),
            prefix_enabled=bool(data.get("prefix_enabled", False)),
            fallback_profile=data.get("fallback_profile") or None,
        )

    def layer_path(self, layer: Layer) -> str:
        """Return the configured path (or :data:`SKIP_LAYER`) for *layer*."""

        return {
            Layer.DEFAULTS: self.defaults_path,
            Layer.INSTANT: self.instant_path,
            Layer.DEFERRED: self.deferred_path,
        }[layer]


def _as_strings(values: Iterable[Any] | str) -> list[str]:
    if isinstance(values, str):
        return [values]
    return [str(value) for value in values]
