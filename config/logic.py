import collections.abc
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from config.loader import load_config
from config.models import Config
from utils.errors import ConfigError
from utils.logger import logger

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
USER_CONFIG_DIR = Path.home() / ".aireview"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = ".aireview.yaml"
ENV_FILENAME = ".env"


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries.
    Arrays are replaced, not merged.
    """
    for key, value in source.items():
        if isinstance(value, collections.abc.Mapping) and key in target and isinstance(target[key], collections.abc.Mapping):
            target[key] = deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def load_environment(env_file: Union[str, Path] = ENV_FILENAME) -> bool:
    """
    Loads API credentials and other variables from a local .env file, if present.
    Variables already set in the process environment win.
    """
    path = Path(env_file)
    if not path.is_file():
        logger.debug(f"No environment file at {path}")
        return False
    logger.info(f"Loading environment from: {path}")
    return load_dotenv(path, override=False)


def find_project_root(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project root by searching upwards for a .git directory or pyproject.toml.
    """
    d = start_dir.resolve()
    while d != d.parent:
        if (d / ".git").is_dir() or (d / "pyproject.toml").is_file():
            return d
        d = d.parent
    return None


def find_project_config(start_dir: Path = Path(".")) -> Optional[Path]:
    """
    Finds the project-specific configuration file (.aireview.yaml) in the project root.
    """
    project_root = find_project_root(start_dir)
    if project_root:
        project_config_path = project_root / PROJECT_CONFIG_FILENAME
        if project_config_path.is_file():
            return project_config_path
    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return load_config(f)


def load_and_merge_configs(custom_config_path: Optional[str] = None, start_dir: Path = Path(".")) -> Config:
    """
    Loads all configurations (default, user, project) and merges them.
    A custom config path can be provided to override all others.

    Raises:
        ConfigError: If the default or custom file is missing or invalid, or the
            merged result fails validation.
    """
    if custom_config_path:
        path = Path(custom_config_path)
        if not path.is_file():
            raise ConfigError(f"Custom config file not found at: {custom_config_path}")
        logger.info(f"Using custom configuration from: {custom_config_path}")
        merged_config = _read_config_file(path)
    else:
        if not DEFAULT_CONFIG_PATH.is_file():
            raise ConfigError("Default configuration file not found.")
        merged_config = _read_config_file(DEFAULT_CONFIG_PATH)

        overlays: List[Path] = []
        if USER_CONFIG_PATH.is_file():
            overlays.append(USER_CONFIG_PATH)
        project_config_path = find_project_config(start_dir)
        if project_config_path:
            overlays.append(project_config_path)

        for path in overlays:
            logger.info(f"Loading configuration from: {path}")
            try:
                merged_config = deep_merge(merged_config, _read_config_file(path))
            except (OSError, ConfigError) as e:
                logger.warning(f"Could not load or parse config at {path}: {e}")

    try:
        final_config = Config(**merged_config)
        logger.debug(f"Final merged config: {final_config.model_dump_json(indent=2, exclude={'model': {'api_key'}})}")
        return final_config
    except Exception as e:
        raise ConfigError(f"Configuration validation failed: {e}")
