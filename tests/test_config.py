import json
import logging

import pytest

from turtlescad.config.settings import ConfigManager, ProcessorConfig


class TestConfigManager:
    def test_defaults(self) -> None:
        config = ConfigManager.default()
        assert config.arc_resolution_default == 40
        assert config.indent_spaces == 2
        assert config.prefer_circle_primitives is True
        assert config.max_call_depth == 100
        assert config.max_steps == 1_000_000

    def test_from_dict(self) -> None:
        config = ConfigManager.from_dict({
            "arc_resolution_default": 12,
            "prefer_circle_primitives": False,
            "unknown_key": "ignored",
        })
        assert config.arc_resolution_default == 12
        assert config.prefer_circle_primitives is False
        assert config.indent_spaces == 2

    @pytest.mark.parametrize("data, name, expected", [
        ({"arc_resolution_default": "12"}, "arc_resolution_default", 40),
        ({"indent_spaces": True}, "indent_spaces", 2),
        ({"prefer_circle_primitives": 1}, "prefer_circle_primitives", True),
        ({"arc_resolution_default": 0}, "arc_resolution_default", 40),
        ({"max_steps": -5}, "max_steps", 1_000_000),
    ])
    def test_invalid_fields_keep_defaults(self, data, name, expected, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            config = ConfigManager.from_dict(data)
        assert getattr(config, name) == expected
        assert "Ignoring config field" in caplog.text

    @pytest.mark.parametrize("field_name, value", [
        ("arc_resolution_default", 0),
        ("indent_spaces", -1),
        ("max_call_depth", 0),
        ("max_call_depth", 1000),
        ("max_steps", 0),
    ])
    def test_validate(self, field_name, value) -> None:
        config = ProcessorConfig(**{field_name: value})
        with pytest.raises(ValueError, match=field_name):
            ConfigManager.validate(config)

    def test_save_and_load(self, tmp_path) -> None:
        path = tmp_path / "settings.json"
        ConfigManager.save_config(ProcessorConfig(indent_spaces=4, max_call_depth=7), str(path))

        assert json.loads(path.read_text())["indent_spaces"] == 4
        loaded = ConfigManager.load_config(str(path))
        assert loaded == ProcessorConfig(indent_spaces=4, max_call_depth=7)

    def test_load_missing_file(self, tmp_path, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            config = ConfigManager.load_config(str(tmp_path / "missing.json"))
        assert config == ProcessorConfig()
        assert "using defaults" in caplog.text

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
    def test_load_bad_content(self, tmp_path, content) -> None:
        path = tmp_path / "bad.json"
        path.write_text(content)
        assert ConfigManager.load_config(str(path)) == ProcessorConfig()
