"""Configuration package for assetrev.

Loads the JSON list of run configurations consumed by the CLI.
"""

from .loader import DEFAULT_CONFIG_PATH, ConfigError, load_run_configs, parse_run_configs

__all__ = ["DEFAULT_CONFIG_PATH", "ConfigError", "load_run_configs", "parse_run_configs"]
