"""Configuration loader with layered parameter precedence."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import DefaultConfig, get_default_config

CONFIG_ENV_VAR = "TEMPO_CONFIG"
DB_ENV_VAR = "TEMPO_DB"
DEFAULT_CONFIG_PATH = Path("~/.config/tempo/config.yaml")


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with layered precedence."""

    config_path: Optional[Path]
    defaults: DefaultConfig
    explicit: bool = False

    @classmethod
    def create(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ConfigLoader":
        """
        Create a ConfigLoader instance.

        An explicit ``config_path`` wins over ``$TEMPO_CONFIG``, which wins
        over ``~/.config/tempo/config.yaml``. Only an explicitly named file
        is required to exist.
        """
        env = os.environ if environ is None else environ
        explicit = True
        if config_path is None and env.get(CONFIG_ENV_VAR):
            config_path = Path(env[CONFIG_ENV_VAR])
        elif config_path is None:
            config_path = DEFAULT_CONFIG_PATH
            explicit = False

        return cls(
            config_path=Path(config_path).expanduser(),
            defaults=get_default_config(),
            explicit=explicit,
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML configuration file."""
        if self.config_path is None:
            return {}

        if not self.config_path.exists():
            if self.explicit:
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_path}",
                    config_path=str(self.config_path),
                )
            return {}

        try:
            with open(self.config_path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read configuration file {self.config_path}: {e}",
                config_path=str(self.config_path),
            ) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {self.config_path}: {e}",
                config_path=str(self.config_path),
            ) from e

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Configuration file {self.config_path} must contain a mapping",
                config_path=str(self.config_path),
            )
        return file_config

    def load_env_config(self, environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """Collect overrides from environment variables."""
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        if env.get(DB_ENV_VAR):
            overrides["store"] = {"db_path": env[DB_ENV_VAR]}
        return overrides

    def merge_config(
        self,
        cli_overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        """
        Merge configuration with layered precedence.

        Priority order:
        1. Command-line overrides (highest priority)
        2. Environment variables
        3. Configuration file
        4. Dataclass defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config(environ))

        if cli_overrides:
            config = self._deep_merge(config, cli_overrides)

        return config

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
