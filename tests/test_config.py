"""
Spill Configuration Tests
"""

import json

import pytest

from spill.config import SpillConfig, parse_port
from spill.constants import DEFAULT_BATCH_SIZE, DEFAULT_CALLBACK_PORT, DEFAULT_TARGET_PORT
from spill.errors import ConfigFileError, InvalidPortError


class TestParsePort:
    """Tests for port parsing."""

    @pytest.mark.parametrize("value,expected", [("631", 631), (" 9100 ", 9100), (1, 1), ("65535", 65535)])
    def test_valid(self, value, expected):
        assert parse_port(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", "0", "65536", "-1", "6.31", None, True])
    def test_invalid(self, value):
        with pytest.raises(InvalidPortError):
            parse_port(value)


class TestSpillConfig:
    """Tests for the run configuration."""

    def test_defaults(self):
        config = SpillConfig()
        assert config.dispatch.target_port == DEFAULT_TARGET_PORT
        assert config.dispatch.batch_size == DEFAULT_BATCH_SIZE
        assert config.listener.port == DEFAULT_CALLBACK_PORT
        assert config.wait_forever is True

    def test_default_config_needs_target_and_callback(self):
        errors = SpillConfig().validate()
        assert any("target" in e for e in errors)
        assert any("callback" in e for e in errors)

    def test_valid(self, run_config):
        assert run_config.validate() == []

    def test_invalid_values(self, run_config):
        run_config.dispatch.batch_size = 0
        run_config.listener.path = "printers"
        run_config.log.level = "LOUD"
        errors = run_config.validate()
        assert len(errors) == 3

    def test_callback(self, run_config):
        assert run_config.callback.url == (
            f"http://127.0.0.1:{run_config.listener.port}/printers/TestPrinter"
        )

    def test_save_and_load(self, run_config, tmp_path):
        path = str(tmp_path / "spill.json")
        run_config.dispatch.batch_size = 64
        run_config.save(path)

        loaded = SpillConfig.load(path)
        assert loaded.to_dict() == run_config.to_dict()

    def test_partial_file(self, tmp_path):
        path = tmp_path / "spill.json"
        path.write_text(json.dumps({"target": "10.0.0.0/24", "dispatch": {"batch_size": 3}}))

        config = SpillConfig.load(str(path))
        assert config.target == "10.0.0.0/24"
        assert config.dispatch.batch_size == 3
        assert config.dispatch.target_port == DEFAULT_TARGET_PORT

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileError):
            SpillConfig.load(str(tmp_path / "missing.json"))

    def test_bad_json(self, tmp_path):
        path = tmp_path / "spill.json"
        path.write_text("{not json")
        with pytest.raises(ConfigFileError):
            SpillConfig.load(str(path))

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "spill.json"
        path.write_text(json.dumps({"listener": {"colour": "blue"}}))
        with pytest.raises(ConfigFileError):
            SpillConfig.load(str(path))

    def test_numeric_string_ports_are_accepted(self, tmp_path):
        path = tmp_path / "spill.json"
        path.write_text(json.dumps({
            "dispatch": {"target_port": "5353"},
            "listener": {"port": " 8631 "},
        }))

        config = SpillConfig.load(str(path))
        assert config.dispatch.target_port == 5353
        assert config.listener.port == 8631

    @pytest.mark.parametrize("data", [
        {"dispatch": {"target_port": "ipp"}},
        {"dispatch": {"target_port": 70000}},
        {"dispatch": {"batch_size": "10"}},
        {"dispatch": {"batch_size": True}},
        {"listener": {"path": 7}},
        {"log": {"level": 10}},
        {"target": ["10.0.0.1"]},
        {"dispatch": "fast"},
    ])
    def test_wrong_types_rejected(self, tmp_path, data):
        path = tmp_path / "spill.json"
        path.write_text(json.dumps(data))
        with pytest.raises(ConfigFileError):
            SpillConfig.load(str(path))

    def test_validate_reports_wrong_types(self, run_config):
        run_config.dispatch.target_port = "631"
        run_config.dispatch.batch_size = "10"
        run_config.log.level = 20
        assert len(run_config.validate()) == 3
