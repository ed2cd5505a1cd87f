from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from lib_layered_vars.application.precedence import flatten_overrides, normalize_overrides, winning_override
from lib_layered_vars.domain.model import OverrideSource

EXTERNAL = [OverrideSource.INVENTORY, OverrideSource.CALLER_SCOPE, OverrideSource.CALL_SITE]
VALUES = st.dictionaries(st.sampled_from(["a", "b", "c", "d"]), st.integers(), max_size=4)
OVERRIDES = st.dictionaries(st.sampled_from(EXTERNAL), VALUES, max_size=3)


def test_call_site_beats_everything() -> None:
    overrides = {
        OverrideSource.INVENTORY: {"db_host": "db2"},
        OverrideSource.CALLER_SCOPE: {"db_host": "dbx"},
        OverrideSource.CALL_SITE: {"db_host": "db3"},
    }
    assert winning_override("db_host", overrides) == (OverrideSource.CALL_SITE, "db3")


def test_profile_default_never_wins() -> None:
    overrides = {OverrideSource.PROFILE_DEFAULT: {"db_host": "db1"}}
    assert winning_override("db_host", overrides) is None
    assert flatten_overrides(overrides) == {}


def test_string_keys_are_accepted() -> None:
    overrides = normalize_overrides({"inventory": {"a": 1}, "caller-scope": {"a": 2}})
    assert winning_override("a", overrides) == (OverrideSource.CALLER_SCOPE, 2)


@given(OVERRIDES)
def test_highest_source_wins_regardless_of_arrival_order(overrides) -> None:
    reversed_arrival = dict(reversed(list(overrides.items())))
    assert flatten_overrides(overrides) == flatten_overrides(reversed_arrival)
    for key, value in flatten_overrides(overrides).items():
        holders = [source for source in EXTERNAL if key in overrides.get(source, {})]
        top = max(holders)
        assert value == overrides[top][key]
        assert winning_override(key, overrides) == (top, value)
