"""Deferred bindings render at access time against the caller's environment."""

from __future__ import annotations

import pytest

from lib_layered_vars.domain.deferred import DeferredContainer, DeferredVar
from lib_layered_vars.domain.errors import ExpressionEvaluationError, UnresolvedReference


def make_container(evaluator) -> DeferredContainer:
    return DeferredContainer(
        "myapp_fp_deferred",
        {
            "welcome_message": DeferredVar("welcome_message", "Welcome, version {{app_version}}", evaluator),
            "banner": DeferredVar("banner", ["{{app_version}}", 3], evaluator),
        },
    )


def test_templates_are_raw_until_accessed(evaluator) -> None:
    container = make_container(evaluator)
    assert container.templates()["welcome_message"] == "Welcome, version {{app_version}}"
    assert evaluator.calls == []


def test_render_uses_supplied_environment(evaluator) -> None:
    container = make_container(evaluator)
    assert container.render("welcome_message", {"app_version": "2.3"}) == "Welcome, version 2.3"


def test_each_access_reflects_the_current_environment(evaluator) -> None:
    container = make_container(evaluator)
    environment = {"app_version": "2.3"}
    first = container["welcome_message"].render(environment)
    environment["app_version"] = "2.4"
    second = container["welcome_message"].render(environment)
    assert (first, second) == ("Welcome, version 2.3", "Welcome, version 2.4")
    assert len(evaluator.calls) == 2


def test_non_string_values_render_recursively(evaluator) -> None:
    container = make_container(evaluator)
    assert container.render("banner", {"app_version": "2.3"}) == ["2.3", 3]


def test_render_all(evaluator) -> None:
    rendered = make_container(evaluator).render_all({"app_version": "1.0"})
    assert rendered == {"welcome_message": "Welcome, version 1.0", "banner": ["1.0", 3]}


def test_missing_name_names_key_and_layer(evaluator) -> None:
    with pytest.raises(UnresolvedReference) as excinfo:
        make_container(evaluator).render("welcome_message", {})
    assert excinfo.value.name == "app_version"
    assert excinfo.value.key == "welcome_message"
    assert excinfo.value.layer == "deferred"


def test_evaluation_failure_is_attributed(evaluator) -> None:
    binding = DeferredVar("broken", "!fail", evaluator)
    with pytest.raises(ExpressionEvaluationError) as excinfo:
        binding.render({})
    assert (excinfo.value.key, excinfo.value.layer) == ("broken", "deferred")


def test_container_is_read_only(evaluator) -> None:
    container = make_container(evaluator)
    with pytest.raises(TypeError):
        container["x"] = DeferredVar("x", "y", evaluator)  # type: ignore[index]
    assert len(container) == 2
    assert set(container) == {"welcome_message", "banner"}
