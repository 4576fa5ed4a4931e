"""Location and raw I/O of the bucket-cli config file.

The config file is a single JSON document holding every profile plus the
name of the current one:

    {"current": "p1", "config": [{"name": "p1", "bucket": ...}, ...]}

Its location is resolved with the following precedence (highest to lowest):
1. CLI argument (--config)
2. Environment variable (BUCKET_CLI_CONFIG)
3. Built-in default (~/.bucketrc)

The file is always read and written as a whole; there is no locking, so the
last writer wins.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from bucket_cli.errors import ConfigParseError, ConfigReadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".bucketrc"

CONFIG_ENV_VAR = "BUCKET_CLI_CONFIG"


def empty_config() -> dict[str, Any]:
    """Return the document used when no config file exists yet."""
    return {"current": "", "config": []}


def get_config_path(cli_value: str | Path | None = None) -> Path:
    """Resolve the config file path.

    Args:
        cli_value: Path passed via --config (highest precedence).

    Returns:
        Path to the config file. The file itself may not exist yet.
    """
    if cli_value:
        return Path(cli_value).expanduser()

    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()

    return Path.home() / CONFIG_FILENAME


def load_config(path: Path) -> dict[str, Any]:
    """Load the config document.

    Args:
        path: Config file path.

    Returns:
        The parsed document. Missing or blank files yield an empty document.

    Raises:
        ConfigReadError: If the file exists but cannot be read.
        ConfigParseError: If the file is not UTF-8 JSON holding a list of named profiles.
    """
    if not path.exists():
        logger.debug("Config file %s does not exist, using empty config", path)
        return empty_config()

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigParseError(str(path), f"not valid UTF-8: {e}") from e
    except OSError as e:
        raise ConfigReadError(str(path), str(e)) from e

    if not content.strip():
        return empty_config()

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigParseError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigParseError(str(path), "top-level value must be an object")

    profiles = data.get("config", [])
    if not isinstance(profiles, list):
        raise ConfigParseError(str(path), "'config' must be a list of profiles")

    for index, item in enumerate(profiles):
        if not isinstance(item, dict) or not isinstance(item.get("name"), str):
            raise ConfigParseError(
                str(path), f"profile #{index} must be an object with a string 'name'"
            )

    data["config"] = profiles
    data["current"] = data.get("current") or ""
    logger.debug("Loaded %d profile(s) from %s", len(profiles), path)
    return data


def save_config(path: Path, data: dict[str, Any]) -> None:
    """Rewrite the whole config document.

    Creates parent directories if they don't exist.

    Args:
        path: Config file path.
        data: Document to write.

    Raises:
        ConfigReadError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigReadError(str(path), str(e)) from e
    logger.debug("Wrote %d profile(s) to %s", len(data.get("config", [])), path)
