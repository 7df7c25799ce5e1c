"""
Processor configuration for the Logo to OpenSCAD pipeline.
Simple JSON-backed settings with per-field fallback to defaults.
"""
import json
import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Each nested REPEAT or call costs several interpreter stack frames
MAX_CALL_DEPTH_LIMIT = 200


@dataclass
class ProcessorConfig:
    """Options for interpretation and code generation."""
    # Arc resolution used until a script calls EXTSETFN
    arc_resolution_default: int = 40

    # Code generation
    indent_spaces: int = 2
    prefer_circle_primitives: bool = True

    # Guards against runaway scripts
    max_call_depth: int = 100
    max_steps: int = 1_000_000


class ConfigManager:
    """Creates, validates, loads and saves processor configurations."""

    @staticmethod
    def default() -> ProcessorConfig:
        return ProcessorConfig()

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ProcessorConfig:
        """
        Build a configuration from loose data.

        Unknown keys are ignored; a field with the wrong type or an invalid
        value keeps its default.
        """
        config = ProcessorConfig()
        for config_field in fields(ProcessorConfig):
            if config_field.name not in data:
                continue

            value = data[config_field.name]
            default = getattr(config, config_field.name)
            if not ConfigManager._has_type_of(value, default):
                logger.warning("Ignoring config field %s: expected %s, got %r",
                               config_field.name, type(default).__name__, value)
                continue

            setattr(config, config_field.name, value)
            try:
                ConfigManager.validate(config)
            except ValueError as e:
                logger.warning("Ignoring config field %s: %s", config_field.name, e)
                setattr(config, config_field.name, default)
        return config

    @staticmethod
    def validate(config: ProcessorConfig):
        """Raise ValueError when a setting is out of range."""
        if config.arc_resolution_default < 1:
            raise ValueError(f"arc_resolution_default must be at least 1, got {config.arc_resolution_default}")
        if config.indent_spaces < 0:
            raise ValueError(f"indent_spaces must not be negative, got {config.indent_spaces}")
        if not 1 <= config.max_call_depth <= MAX_CALL_DEPTH_LIMIT:
            raise ValueError(f"max_call_depth must be between 1 and {MAX_CALL_DEPTH_LIMIT}, "
                             f"got {config.max_call_depth}")
        if config.max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {config.max_steps}")

    @staticmethod
    def save_config(config: ProcessorConfig, filepath: str):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(asdict(config), f, indent=2)

    @staticmethod
    def load_config(filepath: str) -> ProcessorConfig:
        """Load configuration from JSON file, falling back to defaults."""
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read config %s, using defaults: %s", filepath, e)
            return ConfigManager.default()

        if not isinstance(data, dict):
            logger.warning("Config %s is not a JSON object, using defaults", filepath)
            return ConfigManager.default()
        return ConfigManager.from_dict(data)

    @staticmethod
    def _has_type_of(value: Any, default: Any) -> bool:
        # bool is an int subclass, so check it separately
        if isinstance(default, bool) or isinstance(value, bool):
            return isinstance(value, bool) and isinstance(default, bool)
        return isinstance(value, type(default))
