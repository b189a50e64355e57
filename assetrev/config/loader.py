"""Run configuration loading.

The configuration file is a JSON array with one object per run:

    [
      {
        "root_dir": "/srv/www/static",
        "output_filepath": "/srv/www/assets.json",
        "file_filter": "\\\\.(css|js|png)$",
        "dest_format": "%srcdir%%srcfilename%.%crc32%%srcext%",
        "output_mode": "overwrite"
      }
    ]

Any problem reading or validating the file raises ConfigError, which the CLI
treats as fatal.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from assetrev.models import RunConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/file-crc32-calculator/config.json")


class ConfigError(ValueError):
    """Raised when the run configuration list cannot be read or is invalid."""


def parse_run_configs(data: object) -> List[RunConfig]:
    """Validate decoded JSON and build the list of RunConfigs.

    Args:
        data: Decoded JSON document.

    Returns:
        RunConfig instances in file order.

    Raises:
        ConfigError: If the document is not an array of valid run objects.
    """
    if not isinstance(data, list):
        raise ConfigError("Configuration must be a JSON array of run objects")

    configs: List[RunConfig] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigError(f"Configuration entry {index} must be an object")
        try:
            configs.append(RunConfig.from_dict(entry))
        except ValueError as e:
            raise ConfigError(f"Configuration entry {index}: {e}") from e
    return configs


def load_run_configs(config_path: Union[str, Path]) -> List[RunConfig]:
    """Read and validate the run configuration list.

    Args:
        config_path: Path to the JSON configuration file.

    Returns:
        RunConfig instances in file order.

    Raises:
        ConfigError: If the file cannot be read, is not valid JSON, or does
            not describe a list of runs.
    """
    path = Path(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Configuration file {path} is not valid UTF-8: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e

    configs = parse_run_configs(data)
    logger.debug("Loaded %d run configuration(s) from %s", len(configs), path)
    return configs
