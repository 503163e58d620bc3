"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from ..trading.currency import normalize_currency

_PROFILE_FIELDS = ("base_price", "volatility", "spread", "tick_size", "lot_size")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_simulation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate price series generation parameters."""
        errors = []

        if "bar_count" in params:
            value = params["bar_count"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                errors.append(ValidationError(
                    field="bar_count",
                    message="Must be an integer of at least 2",
                    value=value
                ))

        if "bar_interval_seconds" in params:
            value = params["bar_interval_seconds"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="bar_interval_seconds",
                    message="Must be a positive integer",
                    value=value
                ))

        if "imbalance_ratio" in params:
            value = params["imbalance_ratio"]
            if not _is_number(value) or value < 0 or value > 1:
                errors.append(ValidationError(
                    field="imbalance_ratio",
                    message="Must be a number between 0 and 1",
                    value=value
                ))

        for name in ("mean_reversion_rate", "base_volume", "volume_range", "volume_shock_multiplier"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_playback_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate playback parameters."""
        errors = []

        if "base_interval_ms" in params:
            value = params["base_interval_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="base_interval_ms",
                    message="Must be a positive integer",
                    value=value
                ))

        allowed = params.get("allowed_speeds", ())
        if "allowed_speeds" in params:
            if not allowed or not all(_is_number(s) and s > 0 for s in allowed):
                errors.append(ValidationError(
                    field="allowed_speeds",
                    message="Must be a non-empty list of positive numbers",
                    value=allowed
                ))

        if "default_speed" in params:
            value = params["default_speed"]
            if allowed and value not in allowed:
                errors.append(ValidationError(
                    field="default_speed",
                    message="Must be one of allowed_speeds",
                    value=value
                ))

        if "initial_history_bars" in params:
            value = params["initial_history_bars"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="initial_history_bars",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_account_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate account settings."""
        errors = []

        if "balance" in params:
            value = params["balance"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="balance",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "currency" in params:
            value = params["currency"]
            supported = params.get("supported_currencies", ("GBP", "USD", "EUR"))
            if not isinstance(value, str) or normalize_currency(value) not in supported:
                errors.append(ValidationError(
                    field="currency",
                    message=f"Must be one of {list(supported)}",
                    value=value
                ))

        if "leverage" in params:
            value = params["leverage"]
            allowed = params.get("allowed_leverage", (50, 100, 200, 500))
            if value not in allowed:
                errors.append(ValidationError(
                    field="leverage",
                    message=f"Must be one of {list(allowed)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_instrument_overrides(params: dict[str, Any]) -> list[ValidationError]:
        """Validate instrument profile overrides."""
        errors = []

        for name, value in params.items():
            if name not in _PROFILE_FIELDS:
                errors.append(ValidationError(
                    field=name,
                    message="Not an overridable instrument field",
                    value=value
                ))
            elif not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "simulation" in config:
            errors.extend(ConfigValidator.validate_simulation_params(config["simulation"]))

        if "playback" in config:
            errors.extend(ConfigValidator.validate_playback_params(config["playback"]))

        if "account" in config:
            errors.extend(ConfigValidator.validate_account_params(config["account"]))

        return errors
