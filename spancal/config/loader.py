"""File and environment configuration loader.

Loads ``AppConfig`` from a JSON or YAML file, then applies environment
variable overrides of the form ``SPANCAL_<SECTION>__<FIELD>``.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from .schemas import AppConfig

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_KEY = "SPANCAL_CONFIG"
ENV_PREFIX = "SPANCAL_"
NESTED_SEPARATOR = "__"


class ConfigFormat(Enum):
    """Supported configuration file formats."""

    JSON = "json"
    YAML = "yaml"


class ConfigurationError(Exception):
    """Base exception for configuration errors."""

    pass


class FileLoadError(ConfigurationError):
    """Exception raised when file loading fails."""

    pass


class FormatError(ConfigurationError):
    """Exception raised when file format is unsupported or invalid."""

    pass


def _detect_format(path: Path) -> ConfigFormat:
    suffix = path.suffix.lower()
    format_map = {
        ".json": ConfigFormat.JSON,
        ".yaml": ConfigFormat.YAML,
        ".yml": ConfigFormat.YAML,
    }
    if suffix in format_map:
        return format_map[suffix]
    raise FormatError(f"Unsupported file format: {suffix}")


def _parse_content(content: str, format: ConfigFormat) -> dict[str, Any]:
    try:
        if format == ConfigFormat.JSON:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise FormatError(f"Failed to parse {format.value} content: {e}") from e

    if not isinstance(data, dict):
        raise FormatError(
            f"Top-level {format.value} value must be a mapping, got {type(data).__name__}"
        )
    return data


def load_file(file_path: Union[str, Path]) -> dict[str, Any]:
    """Load a raw configuration mapping from a single file.

    Args:
        file_path: Path to a ``.json``, ``.yaml`` or ``.yml`` file

    Returns:
        Configuration dictionary, empty if the file does not exist

    Raises:
        FileLoadError: If the path exists but cannot be read
        FormatError: If the format is unsupported or the content is invalid
    """
    path = Path(file_path)

    if not path.exists():
        logger.warning(f"Configuration file not found: {path}")
        return {}

    if not path.is_file():
        raise FileLoadError(f"Path is not a file: {path}")

    format = _detect_format(path)

    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise FileLoadError(f"Failed to read file {path}: {e}") from e

    config = _parse_content(content, format)
    logger.info(f"Loaded configuration from {path} ({format.value})")
    return config


def load_environment(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Collect ``SPANCAL_<SECTION>__<FIELD>`` overrides into a nested mapping.

    Values are parsed as YAML scalars so ``20``, ``1.5``, ``true`` and ``null``
    arrive with their natural types.
    """
    environ = os.environ if environ is None else environ
    config: dict[str, Any] = {}

    for env_key, env_value in environ.items():
        if not env_key.startswith(ENV_PREFIX) or NESTED_SEPARATOR not in env_key:
            continue

        parts = env_key[len(ENV_PREFIX) :].lower().split(NESTED_SEPARATOR)
        try:
            value = yaml.safe_load(env_value)
        except yaml.YAMLError:
            value = env_value

        node = config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
        logger.debug(f"Loaded env var: {env_key} -> {'.'.join(parts)} = {value!r}")

    return config


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[dict[str, str]] = None,
) -> AppConfig:
    """Load the application configuration.

    Args:
        path: Configuration file; defaults to ``$SPANCAL_CONFIG`` when unset
        environ: Environment mapping used for overrides (defaults to ``os.environ``)

    Returns:
        Validated application configuration

    Raises:
        ConfigurationError: If the file cannot be loaded or fails validation
    """
    environ = os.environ if environ is None else environ

    if path is None:
        path = environ.get(CONFIG_PATH_ENV_KEY)

    data = load_file(path) if path else {}
    data = _deep_merge(data, load_environment(environ))

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
