"""Shared fixtures: in-memory collaborators and an on-disk layer tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest

from lib_layered_vars.domain.errors import ExpressionEvaluationError, UnresolvedReference
from lib_layered_vars.domain.model import EXISTENCE_MARKER, LayerFile


class CountingEvaluator:
    """``{{name}}`` substitution that records every call it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def render(self, template: str, environment: Mapping[str, Any]) -> Any:
        self.calls.append((template, dict(environment)))
        if template.startswith("!fail"):
            raise ExpressionEvaluationError("forced failure")
        rendered = template
        while "{{" in rendered:
            start = rendered.index("{{")
            end = rendered.index("}}", start)
            name = rendered[start + 2 : end].strip()
            if name not in environment:
                raise UnresolvedReference(name)
            rendered = rendered[:start] + str(environment[name]) + rendered[end + 2 :]
        return rendered


@dataclass
class MemorySource:
    """Layer source serving ``{(profile, path): LayerFile}`` and logging calls."""

    files: dict[tuple[str, str], LayerFile] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def load(self, profile: str, path: str) -> LayerFile:
        self.calls.append((profile, path))
        return self.files.get((profile, path), LayerFile.absent(path))

    def add(self, profile: str, path: str, variables: Mapping[str, Any]) -> None:
        self.files[(profile, path)] = LayerFile.present(variables, path=f"{path}/{profile}.yml")


@pytest.fixture()
def evaluator() -> CountingEvaluator:
    return CountingEvaluator()


@pytest.fixture()
def memory_source() -> MemorySource:
    return MemorySource()


@pytest.fixture()
def layer_tree(tmp_path: Path) -> Callable[..., Path]:
    """Return a writer creating ``<tmp>/<layer>/<profile>.yml`` with the marker set."""

    def write(layer: str, profile: str, body: str, *, marker: bool | None = True, suffix: str = "yml") -> Path:
        directory = tmp_path / layer
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / f"{profile}.{suffix}"
        header = "" if marker is None else f"{EXISTENCE_MARKER}: {'true' if marker else 'false'}\n"
        target.write_text(header + body, encoding="utf-8")
        return directory

    return write
