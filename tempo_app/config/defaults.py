"""Default configuration parameters for the mission tracker."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreParams:
    """Interval store parameters."""
    db_path: str = "~/.local/share/tempo/tempo.db"  # SQLite interval log
    create_dirs: bool = True                         # Create parent dir on save
    timeout_seconds: float = 30.0                    # Wait on a locked database


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "WARNING"
    format_json: bool = False
    include_timestamp: bool = True


@dataclass(frozen=True)
class DisplayParams:
    """Rendering parameters for the command line."""
    show_seconds: bool = True


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    store: StoreParams
    logging: LoggingParams
    display: DisplayParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        store=StoreParams(),
        logging=LoggingParams(),
        display=DisplayParams(),
    )
