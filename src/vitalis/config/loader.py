"""Configuration and persona loading and validation."""

from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from vitalis.config.schema import Persona, VitalisConfig


DEFAULT_CONFIG_PATH = Path.home() / ".vitalis" / "vitalis.yaml"


class ConfigError(Exception):
    """Configuration loading or validation error."""


def _read_yaml(path: Path) -> object:
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e


def load_config(path: Optional[Path] = None) -> VitalisConfig:
    """Load and validate Vitalis configuration from YAML file.

    Args:
        path: Path to config file. If None, tries default location.
              If file doesn't exist, returns default config.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If config file exists but is invalid
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    # Zero-config mode: if file doesn't exist, use all defaults
    if not path.exists():
        return VitalisConfig()

    config_data = _read_yaml(path)

    # Handle empty file
    if config_data is None:
        return VitalisConfig()

    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")

    try:
        config = VitalisConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    # Relative persona paths are relative to the config file, not the cwd
    persona_path = config.persona.path
    if persona_path and not Path(persona_path).expanduser().is_absolute():
        config.persona.path = str(path.resolve().parent / persona_path)

    return config


def load_env_file() -> str:
    """Load environment variables from the nearest ``.env`` file.

    The file is searched for from the current working directory upwards.
    Variables already set in the environment are left untouched.

    Returns:
        Path of the loaded file, or an empty string if none was found
    """
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)
    return env_path


def save_config(config: VitalisConfig, path: Optional[Union[str, Path]] = None) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration object to save
        path: Destination path (string or Path object). If None, uses default location.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    elif isinstance(path, str):
        path = Path(path)

    path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump()

    with open(path, "w") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)


def load_persona(path: Optional[Union[str, Path]] = None) -> Persona:
    """Load the assistant persona document.

    The document may be JSON or YAML (JSON is valid YAML) and must contain
    ``name``, ``role``, ``tone`` and a ``directives`` list. It is read once at
    startup and the returned persona is immutable.

    Args:
        path: Persona file. If None, the built-in persona is returned.

    Returns:
        Validated persona

    Raises:
        ConfigError: If the file is missing or invalid
    """
    if path is None:
        return Persona()

    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigError(f"Persona file not found: {path}")

    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise ConfigError(f"Persona in {path} must be a mapping")

    try:
        return Persona(**data)
    except ValidationError as e:
        raise ConfigError(f"Persona validation failed: {e}") from e
