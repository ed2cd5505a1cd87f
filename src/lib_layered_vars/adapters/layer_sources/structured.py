"""Structured layer files, one per (profile, layer).

Purpose
-------
Implement :class:`lib_layered_vars.application.ports.LayerSource` on top of a
directory per layer holding ``<profile>.<ext>`` documents. Parsing is delegated
to small wrappers around ``yaml.safe_load``/``json``/``tomllib`` so error
handling and observability live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  flat mapping outputs.
* :class:`YAMLFileLoader` / :class:`JSONFileLoader` / :class:`TOMLFileLoader` –
  format-specific parsers.
* :class:`ProfileFileSource` – locates the profile's file in a layer directory
  and interprets the existence marker.

File contract
-------------
A flat mapping with string keys plus the boolean marker
:data:`~lib_layered_vars.domain.model.EXISTENCE_MARKER`. Marker ``true`` means
the file carries data (possibly none); marker ``false`` or a missing file means
the profile has no data in this layer. A file without the marker counts as
absent, or is rejected when the source is strict.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Mapping, Sequence

import yaml

from ...domain.errors import InvalidFormat, NotFound
from ...domain.model import EXISTENCE_MARKER, LayerFile
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format: str = ""

    def load(self, path: str) -> Mapping[str, object]:
        raise NotImplementedError

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"fp_file_exists: true")
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:7]
        b'fp_file'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Layer file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("layer_file_read", path=path, layer="file", size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* is a flat-keyed mapping, otherwise raise ``InvalidFormat``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        lib_layered_vars.domain.errors.InvalidFormat: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise InvalidFormat(f"File {path} did not produce a mapping")
        bad_keys = [key for key in data if not isinstance(key, str)]
        if bad_keys:
            raise InvalidFormat(f"File {path} uses non-string variable names: {bad_keys!r}")
        return data  # type: ignore[return-value]

    def _invalid(self, path: str, exc: Exception) -> InvalidFormat:
        log_error("layer_file_invalid", layer="file", path=path, format=self.format, error=str(exc))
        return InvalidFormat(f"Invalid {self.format.upper()} in {path}: {exc}")


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents; an empty document is an empty mapping."""

    format = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            raise self._invalid(path, exc) from exc
        if data is None:
            data = {}
        result = self._ensure_mapping(data, path=path)
        log_debug("layer_file_loaded", layer="file", path=path, format=self.format)
        return result


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format = "json"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("layer_file_loaded", layer="file", path=path, format=self.format)
        return result


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    format = "toml"

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise self._invalid(path, exc) from exc
        result = self._ensure_mapping(data, path=path)
        log_debug("layer_file_loaded", layer="file", path=path, format=self.format)
        return result


# Supported loaders keyed by suffix, in default preference order.
FILE_LOADERS: dict[str, BaseFileLoader] = {
    ".yml": YAMLFileLoader(),
    ".yaml": YAMLFileLoader(),
    ".json": JSONFileLoader(),
    ".toml": TOMLFileLoader(),
}


def load_mapping(path: str) -> Mapping[str, object]:
    """Parse any supported structured file by suffix (used for override files).

    Raises
    ------
    InvalidFormat
        Unsupported suffix or malformed content.
    NotFound
        *path* does not exist.
    """

    loader = FILE_LOADERS.get(Path(path).suffix.lower())
    if loader is None:
        raise InvalidFormat(f"Unsupported file type for {path}; expected one of {', '.join(FILE_LOADERS)}")
    return loader.load(path)


class ProfileFileSource:
    """Read ``<layer_dir>/<profile>.<ext>`` and interpret the existence marker.

    Parameters
    ----------
    prefer:
        Suffix preference (e.g. ``("toml", "yml")``). The first existing
        candidate wins.
    strict:
        Reject files that lack the existence marker instead of treating them
        as absent.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> _ = (Path(tmp.name) / "UAT.yml").write_text("fp_file_exists: true\\nport: 8080\\n", encoding="utf-8")
    >>> layer = ProfileFileSource().load("UAT", tmp.name)
    >>> layer.exists, dict(layer.variables)
    (True, {'port': 8080})
    >>> ProfileFileSource().load("PROD", tmp.name).exists
    False
    >>> tmp.cleanup()
    """

    def __init__(self, *, prefer: Sequence[str] | None = None, strict: bool = False) -> None:
        self._suffixes = _order_suffixes(prefer)
        self._strict = strict

    def load(self, profile: str, path: str) -> LayerFile:
        for candidate in self.candidates(profile, path):
            if Path(candidate).is_file():
                return self._interpret(FILE_LOADERS[Path(candidate).suffix].load(candidate), candidate)
        log_debug("layer_file_missing", layer="file", path=path, profile=profile)
        return LayerFile.absent(path)

    def candidates(self, profile: str, path: str) -> list[str]:
        """Return candidate file paths for *profile* in preference order."""

        base = Path(path)
        return [str(base / f"{profile}{suffix}") for suffix in self._suffixes]

    def _interpret(self, data: Mapping[str, object], path: str) -> LayerFile:
        if EXISTENCE_MARKER not in data:
            if self._strict:
                log_error("layer_file_invalid", layer="file", path=path, error="missing existence marker")
                raise InvalidFormat(f"File {path} lacks the {EXISTENCE_MARKER!r} marker")
            log_debug("layer_file_unmarked", layer="file", path=path)
            return LayerFile.absent(path)
        marker = data[EXISTENCE_MARKER]
        if not isinstance(marker, bool):
            raise InvalidFormat(f"File {path}: {EXISTENCE_MARKER!r} must be a boolean, got {marker!r}")
        if not marker:
            return LayerFile.absent(path)
        variables = {key: value for key, value in data.items() if key != EXISTENCE_MARKER}
        return LayerFile.present(variables, path=path)


def _order_suffixes(prefer: Sequence[str] | None) -> list[str]:
    """Order supported suffixes so preferred ones come first (stable sort).

    Examples
    --------
    >>> _order_suffixes(["toml", "json"])
    ['.toml', '.json', '.yml', '.yaml']
    >>> _order_suffixes(None)
    ['.yml', '.yaml', '.json', '.toml']
    """

    suffixes = list(FILE_LOADERS)
    if not prefer:
        return suffixes
    ranking = {"." + suffix.lower().lstrip("."): idx for idx, suffix in enumerate(prefer)}
    return sorted(suffixes, key=lambda suffix: ranking.get(suffix, len(ranking)))
