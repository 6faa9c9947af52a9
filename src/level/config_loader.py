"""Load generation parameters from JSON files.

The file holds an optional ``room`` object (a single room's parameters) and
an optional ``level`` object (multi-room parameters, including the nested
``*_room_params`` objects).
"""

from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

from src.level.errors import ConfigError
from src.level.generation_params import LevelGenerationParams, RoomGenerationParams

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "generation.json"

PathLike = Union[str, Path]


def _read_section(path: PathLike, section: str) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found; using defaults", path)
        return {}
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    value = data.get(section, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{section}' in {path} must be an object")
    return value


def load_room_params(path: PathLike = DEFAULT_CONFIG_PATH) -> RoomGenerationParams:
    """
    Load single-room parameters.

    Args:
        path: JSON config file

    Returns:
        Validated parameters; defaults when the file is missing

    Raises:
        ConfigError: If the file is not valid JSON or has bad values
    """
    section = _read_section(path, "room")
    try:
        params = RoomGenerationParams.from_dict(section)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid room parameters in {path}: {exc}") from exc
    return params.validate()


def load_level_params(path: PathLike = DEFAULT_CONFIG_PATH) -> LevelGenerationParams:
    """
    Load multi-room level parameters.

    Raises:
        ConfigError: If the file is not valid JSON or has bad values
    """
    section = _read_section(path, "level")
    try:
        params = LevelGenerationParams.from_dict(section)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid level parameters in {path}: {exc}") from exc
    return params.validate()


def save_params(path: PathLike, room: RoomGenerationParams, level: LevelGenerationParams) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"room": room.to_dict(), "level": level.to_dict()}, indent=2))
    logger.info("Saved generation config to %s", path)
