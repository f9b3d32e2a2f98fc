"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    AuctionParams,
    ConcurrencyParams,
    LedgerConfig,
    LoggingParams,
    NotificationParams,
    StoreParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "ledger.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: LedgerConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load deployment overrides from ``ledger.yaml`` if present."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config.get("ledger", {}) if file_config else {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. ledger.yaml in the config directory
        3. Built-in defaults (lowest priority)
        """
        config = asdict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> LedgerConfig:
        """
        Build a validated LedgerConfig.

        Raises:
            ConfigurationError: If any merged value fails validation
        """
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            details = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            raise ConfigurationError(
                "Invalid ledger configuration: " + "; ".join(details),
                errors=errors
            )

        try:
            return build_config(merged)
        except TypeError as e:
            raise ConfigurationError(f"Unknown ledger configuration key: {e}") from e

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def build_config(config: dict[str, Any]) -> LedgerConfig:
    """Convert a merged configuration dictionary into a LedgerConfig."""
    return LedgerConfig(
        store=StoreParams(**config.get("store", {})),
        auction=AuctionParams(**config.get("auction", {})),
        concurrency=ConcurrencyParams(**config.get("concurrency", {})),
        notifications=NotificationParams(**config.get("notifications", {})),
        logging=LoggingParams(**config.get("logging", {})),
        default_currency=config.get("default_currency", "ETH"),
    )
