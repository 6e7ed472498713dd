"""
Configuration module for the importer.

Provides:
- YAML config loading
- Site, HTTP and store settings
- Environment variable substitution
"""

from .loader import AppConfig, ConfigLoader, HttpConfig, load_config

__all__ = ["AppConfig", "ConfigLoader", "HttpConfig", "load_config"]
