"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    AccountParams,
    DefaultConfig,
    FootprintParams,
    PersistenceParams,
    PlaybackParams,
    SimulationParams,
    TradingParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "simulator.yaml"

_SECTION_TYPES = {
    "simulation": SimulationParams,
    "footprint": FootprintParams,
    "playback": PlaybackParams,
    "account": AccountParams,
    "trading": TradingParams,
    "persistence": PersistenceParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def _load_file(self) -> dict[str, Any]:
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Malformed configuration file: {config_file}",
                    field=CONFIG_FILENAME,
                ) from e

        return loaded or {}

    def load_instrument_config(self, symbol: str) -> dict[str, Any]:
        """Load instrument profile overrides for one symbol."""
        return self._load_file().get("instruments", {}).get(symbol, {})  # type: ignore[no-any-return]

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Call-site overrides (highest priority)
        2. simulator.yaml sections
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        file_config = {k: v for k, v in self._load_file().items() if k in _SECTION_TYPES}
        config = self._deep_merge(config, file_config)

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge, validate and build a typed configuration."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            first = errors[0]
            raise ConfigurationError(
                f"{first.field}: {first.message} (got: {first.value})",
                field=first.field,
                value=first.value,
                context={"errors": [f"{e.field}: {e.message}" for e in errors]},
            )

        return DefaultConfig(**{
            name: self._build_section(section_type, merged.get(name, {}))
            for name, section_type in _SECTION_TYPES.items()
        })

    def _build_section(self, section_type: type, values: dict[str, Any]) -> Any:
        known = {f.name for f in fields(section_type)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown {section_type.__name__} keys: {sorted(unknown)}",
                field=section_type.__name__,
                value=sorted(unknown),
            )
        # YAML has no tuples; keep the frozen dataclass hashable-friendly
        coerced = {k: tuple(v) if isinstance(v, list) else v for k, v in values.items()}
        return section_type(**coerced)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
