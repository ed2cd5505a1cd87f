from __future__ import annotations

import pytest

from lib_layered_vars.application.layers import load_layer, load_layers
from lib_layered_vars.domain.errors import InvalidFormat, LayerLoadError, NotFound
from lib_layered_vars.domain.model import SKIP_LAYER, ConsumerContext, Layer, LayerFile


def make_context(defaults: str = "/d", instant: str = "/i", deferred: str = "/f") -> ConsumerContext:
    return ConsumerContext("myapp", "UAT", {"UAT"}, defaults, instant, deferred)


def test_loads_every_layer_for_the_profile(memory_source) -> None:
    memory_source.add("UAT", "/d", {"a": 1})
    memory_source.add("UAT", "/i", {"b": "{{a}}"})
    memory_source.add("UAT", "/f", {"c": "{{b}}"})
    layers = load_layers("UAT", make_context(), memory_source)
    assert list(layers) == [Layer.DEFAULTS, Layer.INSTANT, Layer.DEFERRED]
    assert dict(layers[Layer.INSTANT].variables) == {"b": "{{a}}"}
    assert memory_source.calls == [("UAT", "/d"), ("UAT", "/i"), ("UAT", "/f")]


def test_skipped_layer_never_reaches_the_source(memory_source) -> None:
    memory_source.add("UAT", SKIP_LAYER, {"leak": True})
    layers = load_layers("UAT", make_context(instant=SKIP_LAYER, deferred=SKIP_LAYER), memory_source)
    assert layers[Layer.INSTANT].skipped
    assert not layers[Layer.INSTANT].variables
    assert memory_source.calls == [("UAT", "/d")]


def test_absent_profile_file_is_empty_not_an_error(memory_source) -> None:
    layer = load_layer("UAT", Layer.DEFAULTS, "/d", memory_source)
    assert not layer.exists
    assert not layer.variables
    assert layer.path == "/d"


def test_present_but_empty_file_keeps_existence(memory_source) -> None:
    memory_source.add("UAT", "/d", {})
    layer = load_layer("UAT", Layer.DEFAULTS, "/d", memory_source)
    assert layer.exists
    assert not layer.variables


class RaisingSource:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def load(self, profile: str, path: str) -> LayerFile:
        raise self.exc


@pytest.mark.parametrize(
    "exc",
    [InvalidFormat("bad yaml"), PermissionError("denied"), ValueError("malformed payload"), KeyError("fp_file_exists")],
)
def test_source_failures_become_layer_load_errors(exc: Exception) -> None:
    with pytest.raises(LayerLoadError) as excinfo:
        load_layer("UAT", Layer.INSTANT, "/i", RaisingSource(exc))
    assert excinfo.value.layer == "instant"
    assert excinfo.value.path == "/i"
    assert excinfo.value.__cause__ is exc


def test_not_found_from_source_means_absent() -> None:
    layer = load_layer("UAT", Layer.DEFERRED, "/f", RaisingSource(NotFound("gone")))
    assert not layer.exists
