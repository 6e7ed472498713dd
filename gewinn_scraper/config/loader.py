"""
YAML configuration loader.

Loads site, HTTP and store settings from YAML with:
- Environment variable substitution
- Defaults for every missing key
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
import structlog

from gewinn_scraper.errors import ConfigError
from gewinn_scraper.navigators.base import SiteConfig
from gewinn_scraper.storage import StoreConfig

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE = "site.yml"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty with a warning if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class HttpConfig:
    """Page fetcher settings."""
    connect_timeout: float = 10.0
    timeout: float = 30.0
    requests_per_second: float = 0.0
    max_retries: int = 1
    accept_language: str = "de-DE,de;q=0.9,en-US;q=0.8,en;q=0.7"

    @classmethod
    def from_dict(cls, data: dict) -> "HttpConfig":
        defaults = cls()
        return cls(
            connect_timeout=float(data.get("connect_timeout", defaults.connect_timeout)),
            timeout=float(data.get("timeout", defaults.timeout)),
            requests_per_second=float(data.get("requests_per_second", defaults.requests_per_second)),
            max_retries=int(data.get("max_retries", defaults.max_retries)),
            accept_language=data.get("accept_language", defaults.accept_language),
        )


@dataclass
class AppConfig:
    """Complete importer configuration."""
    site: SiteConfig = field(default_factory=SiteConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    store: StoreConfig = field(default_factory=StoreConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "AppConfig":
        return cls(
            site=SiteConfig.from_dict(data.get("site") or {}),
            http=HttpConfig.from_dict(data.get("http") or {}),
            store=StoreConfig.from_dict(data.get("store") or {}),
        )


class ConfigLoader:
    """
    Configuration loader.

    Loads YAML config files from a directory (the package config
    directory by default).
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise ConfigError(f"Config root must be a mapping: {filepath}")

        return config or {}

    def load(self, filename: str = DEFAULT_CONFIG_FILE) -> AppConfig:
        """
        Load the importer configuration.

        Args:
            filename: Config file name

        Returns:
            AppConfig with defaults for missing keys
        """
        data = self.load_file(filename)
        try:
            return AppConfig.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration in {filename}: {e}") from e


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Convenience function to load the configuration.

    Args:
        config_path: Optional path to a YAML file (packaged site.yml otherwise)

    Returns:
        AppConfig
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent))
        return loader.load(Path(config_path).name)

    return ConfigLoader().load()
