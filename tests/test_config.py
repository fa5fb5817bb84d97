# tests/test_config.py
"""Tests for AnalysisConfig and JSON config loading."""

import json
import logging

import pytest

from valuesem.config import (
    DEFAULT_KNOWN_WRAPPERS,
    AnalysisConfig,
    ConfigError,
    config_from_dict,
    load_config,
)


class TestAnalysisConfig:

    def test_defaults_are_valid(self):
        config = AnalysisConfig()
        assert config.validate() == []
        assert config.guard_policy == "call"
        assert "System.ArraySegment<T>" in config.known_wrappers

    def test_validate_reports_each_problem(self):
        problems = AnalysisConfig(guard_policy="global", severity="fatal").validate()
        assert len(problems) == 2

    def test_merged_unions_sets(self):
        config = AnalysisConfig().merged(known_wrappers=["My.Window<T>"])
        assert "My.Window<T>" in config.known_wrappers
        assert DEFAULT_KNOWN_WRAPPERS <= config.known_wrappers

    def test_merged_skips_none(self):
        base = AnalysisConfig(guard_policy="path")
        assert base.merged(guard_policy=None).guard_policy == "path"
        assert base.merged(guard_policy="call").guard_policy == "call"

    def test_frozen(self):
        with pytest.raises(Exception):
            AnalysisConfig().guard_policy = "path"


class TestConfigFromDict:

    def test_full(self):
        config = config_from_dict({
            "known_wrappers": ["A<T>"],
            "inline_array_attributes": ["Fixed"],
            "guard_policy": "path",
            "ignore_types": ["Legacy"],
            "suppress": ["JSV01"],
            "suppress_types": ["JSV01:Legacy.*"],
            "severity": "error",
        })
        assert config.known_wrappers == frozenset({"A<T>"})
        assert config.inline_array_attributes == frozenset({"Fixed"})
        assert config.guard_policy == "path"
        assert config.ignore_types == frozenset({"Legacy"})
        assert config.suppress == frozenset({"JSV01"})
        assert config.type_suppressions() == [("JSV01", "Legacy.*")]
        assert config.severity == "error"

    def test_empty_keeps_defaults(self):
        assert config_from_dict({}) == AnalysisConfig()

    def test_unknown_key_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="valuesem.config"):
            config_from_dict({"colour": "blue"})
        assert "colour" in caplog.text

    @pytest.mark.parametrize("raw", [
        {"known_wrappers": "A<T>"},
        {"known_wrappers": [1, 2]},
        {"guard_policy": 3},
        {"guard_policy": "global"},
        {"severity": "fatal"},
        {"suppress_types": ["JSV01"]},
        {"suppress_types": [":Legacy"]},
        ["not", "an", "object"],
    ])
    def test_bad_values(self, raw):
        with pytest.raises(ConfigError):
            config_from_dict(raw)


class TestLoadConfig:

    def test_load(self, tmp_path):
        path = tmp_path / "valuesem.json"
        path.write_text(json.dumps({"ignore_types": ["Legacy"]}))
        assert load_config(path).ignore_types == frozenset({"Legacy"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read config"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ nope")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(path)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
