"""
Configuration loader for the Project Status Engine.

Loads settings from status_engine_config.yaml and provides typed access
to all configuration sections.
"""
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml


# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "status_engine_config.yaml"

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class StatusEngineConfig:
    """
    Configuration manager for the Project Status Engine.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        # Clear the cached singleton to force reload on next get_config()
        get_config.cache_clear()

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Database
    # =========================================================================

    @property
    def database(self) -> dict:
        """Database configuration."""
        return self._config.get("database", {})

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL."""
        return self.database.get("url", "sqlite:///./status_engine.db")

    # =========================================================================
    # Recomputation
    # =========================================================================

    @property
    def recompute(self) -> dict:
        """Bulk recomputation configuration."""
        return self._config.get("recompute", {})

    @property
    def max_workers(self) -> int:
        """Size of the worker pool used by bulk recomputation."""
        workers = int(self.recompute.get("max_workers", 4))
        if workers < 1:
            raise ConfigurationError("recompute.max_workers must be at least 1")
        return workers

    @property
    def write_delay_seconds(self) -> float:
        """Delay inserted after each per-project write."""
        return float(self.recompute.get("write_delay_seconds", 0.1))

    @property
    def preserve_manual_statuses(self) -> bool:
        """Whether bulk runs leave on-hold / cancelled projects untouched."""
        return self.recompute.get("preserve_manual_statuses", True)

    @property
    def skip_unchanged(self) -> bool:
        """Whether to skip the write when the status did not change."""
        return self.recompute.get("skip_unchanged", True)

    # =========================================================================
    # Cache
    # =========================================================================

    @property
    def cache(self) -> dict:
        """Read-through cache configuration."""
        return self._config.get("cache", {})

    @property
    def cache_enabled(self) -> bool:
        """Whether activity / progress record lookups are cached."""
        return self.cache.get("enabled", True)

    @property
    def cache_ttl_seconds(self) -> int:
        """Time-to-live for cached lookups."""
        return int(self.cache.get("ttl_seconds", 300))

    @property
    def cache_max_entries(self) -> int:
        """Maximum number of cached lookups kept in memory."""
        return int(self.cache.get("max_entries", 500))

    # =========================================================================
    # Scheduler
    # =========================================================================

    @property
    def scheduler(self) -> dict:
        """Scheduler configuration."""
        return self._config.get("scheduler", {})

    @property
    def scheduler_enabled(self) -> bool:
        """Whether the periodic recompute job is registered."""
        return self.scheduler.get("enabled", True)

    @property
    def scheduler_interval_minutes(self) -> int:
        """Minutes between scheduled bulk recomputations."""
        return int(self.scheduler.get("interval_minutes", 60))

    # =========================================================================
    # Logging
    # =========================================================================

    @property
    def logging(self) -> dict:
        """Logging configuration."""
        return self._config.get("logging", {})

    @property
    def log_level(self) -> str:
        """Root log level name."""
        return str(self.logging.get("level", "INFO")).upper()

    @property
    def log_format(self) -> str:
        """Log record format string."""
        return self.logging.get("format", DEFAULT_LOG_FORMAT)

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> StatusEngineConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        StatusEngineConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return StatusEngineConfig(path)


def reload_config() -> StatusEngineConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
