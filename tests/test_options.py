"""
Tests for configuration defaults and per-model option merging.
"""
import dataclasses

import pytest

from polydoc import OdmConfig, PolyDoc, create_odm
from polydoc.utils import merge_options

from .conftest import FakeConnection


DEFAULTS = {
    "enforce_missing": False,
    "enforce_extra": "none",
    "enforce_type": "loose",
    "time_format": "native",
    "validate": "onsave",
}


def test_defaults_when_keys_are_omitted():
    odm = create_odm(r=FakeConnection())

    assert odm.get_options() == DEFAULTS
    assert odm.config.db == "test"


def test_supplied_values_win():
    odm = create_odm(
        {
            "db": "blog",
            "enforce_missing": True,
            "enforce_extra": "strict",
            "enforce_type": "strict",
            "timeFormat": "raw",
            "validate": "oncreate",
        },
        r=FakeConnection(),
    )

    assert odm.config.db == "blog"
    assert odm.get_options() == {
        "enforce_missing": True,
        "enforce_extra": "strict",
        "enforce_type": "strict",
        "time_format": "raw",
        "validate": "oncreate",
    }


def test_none_values_fall_back_to_defaults():
    odm = PolyDoc({"enforce_type": None, "db": None}, r=FakeConnection())

    assert odm.get_options()["enforce_type"] == "loose"
    assert odm.config.db == "test"


def test_connection_handle_can_come_from_the_mapping():
    handle = FakeConnection()
    odm = PolyDoc({"r": handle})

    assert odm.r is handle


def test_get_options_returns_the_stored_defaults():
    odm = PolyDoc(r=FakeConnection())

    assert odm.get_options() is odm.get_options()


def test_keyword_overrides_apply_on_top_of_a_config_object():
    config = OdmConfig(db="base", max=10)
    odm = PolyDoc(config, r=FakeConnection(), validate="oncreate")

    assert odm.config.db == "base"
    assert odm.config.max == 10
    assert odm.get_options()["validate"] == "oncreate"


def test_config_is_frozen():
    config = OdmConfig()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.db = "other"  # type: ignore[misc]


def test_from_env(monkeypatch):
    monkeypatch.setenv("POLYDOC_DB", "envdb")
    monkeypatch.setenv("POLYDOC_MAX", "20")
    monkeypatch.setenv("POLYDOC_ENFORCE_MISSING", "true")
    monkeypatch.setenv("MONGODB_URI", "mongodb://db.internal:27017")
    monkeypatch.delenv("POLYDOC_URI", raising=False)

    config = OdmConfig.from_env()

    assert config.db == "envdb"
    assert config.max == 20
    assert config.enforce_missing is True
    assert config.uri == "mongodb://db.internal:27017"


def test_merge_leaves_defaults_untouched():
    defaults = {"validate": "onsave", "nested": {"a": 1}}

    merged = merge_options(defaults, {"validate": "oncreate", "custom": 3})
    merged["nested"]["a"] = 2

    assert merged["validate"] == "oncreate"
    assert merged["custom"] == 3
    assert defaults == {"validate": "onsave", "nested": {"a": 1}}


def test_merge_replaces_values_wholesale():
    merged = merge_options({"nested": {"a": 1, "b": 2}}, {"nested": {"a": 5}})

    assert merged == {"nested": {"a": 5}}


def test_merge_without_overrides_is_a_copy():
    defaults = dict(DEFAULTS)

    merged = merge_options(defaults)

    assert merged == defaults
    assert merged is not defaults
