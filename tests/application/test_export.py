from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_layered_vars.application.deferred import register_deferred
from lib_layered_vars.application.export import DEFERRED_CONTAINER, container_name, export, export_name, prefix_layer
from lib_layered_vars.domain.errors import NameCollision
from lib_layered_vars.domain.model import SKIP_LAYER, ConsumerContext, LayerFile

NAMES = st.dictionaries(st.from_regex(r"[a-z][a-z0-9_]{0,8}", fullmatch=True), st.integers(), max_size=6)


def make_context(prefix: bool) -> ConsumerContext:
    return ConsumerContext("myapp", "UAT", {"UAT"}, "/d", SKIP_LAYER, SKIP_LAYER, prefix_enabled=prefix)


def test_container_name_follows_prefix_flag() -> None:
    assert container_name(make_context(False)) == DEFERRED_CONTAINER == "fp_deferred"
    assert container_name(make_context(True)) == "myapp_fp_deferred"


def test_prefix_layer_renames_every_variable() -> None:
    layer = LayerFile.present({"service_name": "httpd", "config_dir": "/etc/httpd"}, path="d.yml")
    renamed = prefix_layer(make_context(True), layer)
    assert dict(renamed.variables) == {"myapp_service_name": "httpd", "myapp_config_dir": "/etc/httpd"}
    assert renamed.path == "d.yml" and renamed.exists


def test_prefix_layer_is_identity_when_disabled() -> None:
    layer = LayerFile.present({"a": 1})
    assert prefix_layer(make_context(False), layer) is layer


@given(NAMES, st.booleans())
def test_prefixing_is_uniform(variables, prefix) -> None:
    context = make_context(prefix)
    renamed = prefix_layer(context, LayerFile.present(variables))
    name = container_name(context)
    exported = export(renamed.variables, object(), name)
    if prefix:
        assert all(key.startswith("myapp_") for key in exported)
    else:
        assert set(exported) == set(variables) | {"fp_deferred"}
    assert len(exported) == len(variables) + 1
    assert sorted(export_name(context, key) for key in variables) == sorted(renamed.variables)


def test_export_rejects_container_name_collisions() -> None:
    with pytest.raises(NameCollision):
        export({"fp_deferred": 1}, object(), "fp_deferred")


def test_register_deferred_stores_raw_templates(evaluator) -> None:
    layer = LayerFile.present({"welcome_message": "Welcome, version {{app_version}}"}, path="f.yml")
    container = register_deferred(layer, "myapp_fp_deferred", evaluator)
    assert container.name == "myapp_fp_deferred"
    assert container.templates() == {"welcome_message": "Welcome, version {{app_version}}"}
    assert evaluator.calls == []
