from __future__ import annotations

import pytest

from lib_layered_vars.application.merge import merge_eager
from lib_layered_vars.domain.errors import ExpressionEvaluationError, UnresolvedReference
from lib_layered_vars.domain.model import LayerFile, OverrideSource


def test_defaults_merge_without_evaluation(evaluator) -> None:
    result = merge_eager(
        LayerFile.present({"service_name": "httpd", "motd": "{{not_rendered}}"}, path="d.yml"),
        LayerFile.absent(),
        {},
        evaluator,
    )
    assert result.values == {"service_name": "httpd", "motd": "{{not_rendered}}"}
    assert evaluator.calls == []
    assert result.provenance["service_name"] == {"layer": "defaults", "path": "d.yml", "key": "service_name"}


def test_instant_sees_defaults_and_wins_collisions(evaluator) -> None:
    result = merge_eager(
        LayerFile.present({"api_server": "prod.example.com", "api_endpoint": "unset"}),
        LayerFile.present({"api_endpoint": "https://{{api_server}}/v1/data"}, path="i.yml"),
        {},
        evaluator,
    )
    assert result.values["api_endpoint"] == "https://prod.example.com/v1/data"
    assert result.provenance["api_endpoint"]["layer"] == "instant"


def test_instant_variables_see_earlier_instant_results(evaluator) -> None:
    result = merge_eager(
        LayerFile.present({"host": "h"}),
        LayerFile.present({"base": "https://{{host}}", "health": "{{base}}/health"}),
        {},
        evaluator,
    )
    assert result.values["health"] == "https://h/health"


def test_overrides_follow_precedence_not_arrival(evaluator) -> None:
    overrides = {
        OverrideSource.CALL_SITE: {"db_host": "db3"},
        OverrideSource.INVENTORY: {"db_host": "db2", "db_port": 5433},
    }
    result = merge_eager(LayerFile.present({"db_host": "db1", "db_port": 5432}), LayerFile.absent(), overrides, evaluator)
    assert result.values == {"db_host": "db3", "db_port": 5433}
    assert result.overridden == {"db_host": OverrideSource.CALL_SITE, "db_port": OverrideSource.INVENTORY}
    assert result.provenance["db_host"]["layer"] == "call_site"


def test_override_only_names_feed_instant_expressions_but_are_not_exported(evaluator) -> None:
    overrides = {OverrideSource.CALLER_SCOPE: {"region": "eu"}}
    result = merge_eager(LayerFile.absent(), LayerFile.present({"bucket": "logs-{{region}}"}), overrides, evaluator)
    assert result.values == {"bucket": "logs-eu"}
    assert result.environment["region"] == "eu"


def test_instant_uses_overridden_default(evaluator) -> None:
    overrides = {OverrideSource.INVENTORY: {"api_server": "staging.example.com"}}
    result = merge_eager(
        LayerFile.present({"api_server": "prod.example.com"}),
        LayerFile.present({"api_endpoint": "https://{{api_server}}/v1"}),
        overrides,
        evaluator,
    )
    assert result.values["api_endpoint"] == "https://staging.example.com/v1"


def test_overridden_instant_keeps_override_without_rendering(evaluator) -> None:
    overrides = {OverrideSource.CALL_SITE: {"api_endpoint": "https://pinned/v1"}}
    result = merge_eager(LayerFile.absent(), LayerFile.present({"api_endpoint": "{{missing}}"}), overrides, evaluator)
    assert result.values["api_endpoint"] == "https://pinned/v1"
    assert result.overridden["api_endpoint"] is OverrideSource.CALL_SITE
    assert evaluator.calls == []


def test_profile_default_overrides_sit_beneath_the_defaults_layer(evaluator) -> None:
    overrides = {OverrideSource.PROFILE_DEFAULT: {"db_host": "seed", "db_user": "app"}}
    result = merge_eager(LayerFile.present({"db_host": "db1"}), LayerFile.absent(), overrides, evaluator)
    assert result.values == {"db_host": "db1", "db_user": "app"}
    assert result.provenance["db_user"]["layer"] == "profile_default"
    assert result.overridden == {}


def test_unresolved_reference_names_key_and_layer(evaluator) -> None:
    with pytest.raises(UnresolvedReference) as excinfo:
        merge_eager(LayerFile.absent(), LayerFile.present({"url": "{{api_server}}"}), {}, evaluator)
    assert (excinfo.value.name, excinfo.value.key, excinfo.value.layer) == ("api_server", "url", "instant")


def test_evaluation_error_aborts_without_retry(evaluator) -> None:
    instant = LayerFile.present({"first": "!fail", "second": "ok"})
    with pytest.raises(ExpressionEvaluationError) as excinfo:
        merge_eager(LayerFile.absent(), instant, {}, evaluator)
    assert excinfo.value.key == "first"
    assert [template for template, _ in evaluator.calls] == ["!fail"]


def test_merged_values_are_independent_copies(evaluator) -> None:
    source = {"ports": [80]}
    result = merge_eager(LayerFile.present(source), LayerFile.absent(), {}, evaluator)
    result.values["ports"].append(443)
    assert source["ports"] == [80]
