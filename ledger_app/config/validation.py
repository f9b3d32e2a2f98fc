"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any


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
    def validate_store_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate durable store parameters."""
        errors = []

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="store.db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="store.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "cooldown_seconds" in params:
            value = params["cooldown_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="store.cooldown_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_auction_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate auction parameters."""
        errors = []

        if "auto_settle_on_read" in params:
            value = params["auto_settle_on_read"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="auction.auto_settle_on_read",
                    message="Must be a boolean",
                    value=value
                ))

        if params.get("max_duration_seconds") is not None:
            value = params["max_duration_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="auction.max_duration_seconds",
                    message="Must be a positive number or null",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_concurrency_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate retry parameters."""
        errors = []

        if "max_retries" in params:
            value = params["max_retries"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="concurrency.max_retries",
                    message="Must be an integer of at least 1",
                    value=value
                ))

        if "backoff_base_seconds" in params:
            value = params["backoff_base_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="concurrency.backoff_base_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_notification_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate notification parameters."""
        errors = []

        if "max_workers" in params:
            value = params["max_workers"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="notifications.max_workers",
                    message="Must be a non-negative integer",
                    value=value
                ))

        for flag in ("enabled", "stdout"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ValidationError(
                    field=f"notifications.{flag}",
                    message="Must be a boolean",
                    value=params[flag]
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in (
                "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
            ):
                errors.append(ValidationError(
                    field="logging.level",
                    message="Must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "store" in config:
            errors.extend(ConfigValidator.validate_store_params(config["store"]))

        if "auction" in config:
            errors.extend(ConfigValidator.validate_auction_params(config["auction"]))

        if "concurrency" in config:
            errors.extend(ConfigValidator.validate_concurrency_params(config["concurrency"]))

        if "notifications" in config:
            errors.extend(ConfigValidator.validate_notification_params(config["notifications"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        if "default_currency" in config:
            value = config["default_currency"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="default_currency",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors
