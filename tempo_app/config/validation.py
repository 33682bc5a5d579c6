"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


_KNOWN_SECTIONS = {"store", "logging", "display"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_store_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate interval store parameters."""
        errors = []

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ValidationError(
                    field="store.db_path",
                    message="Must be a non-empty path",
                    value=value
                ))

        if "create_dirs" in params:
            value = params["create_dirs"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="store.create_dirs",
                    message="Must be a boolean",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                errors.append(ValidationError(
                    field="store.timeout_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {', '.join(sorted(_LOG_LEVELS))}",
                    value=value
                ))

        for flag in ("format_json", "include_timestamp"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ValidationError(
                    field=f"logging.{flag}",
                    message="Must be a boolean",
                    value=params[flag]
                ))

        return errors

    @staticmethod
    def validate_display_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate display parameters."""
        errors = []

        if "show_seconds" in params and not isinstance(params["show_seconds"], bool):
            errors.append(ValidationError(
                field="display.show_seconds",
                message="Must be a boolean",
                value=params["show_seconds"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section in config:
            if section not in _KNOWN_SECTIONS:
                errors.append(ValidationError(
                    field=str(section),
                    message="Unknown configuration section",
                    value=config[section]
                ))

        validators = {
            "store": ConfigValidator.validate_store_params,
            "logging": ConfigValidator.validate_logging_params,
            "display": ConfigValidator.validate_display_params,
        }
        for section, validator in validators.items():
            if section not in config:
                continue
            params = config[section]
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue
            errors.extend(validator(params))

        return errors
