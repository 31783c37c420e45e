"""Config, catalog and state file loaders used by the command dispatcher."""

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ._logging import get_logger
from .errors import ConfigParseError

LOGGER = get_logger("config")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _read_text(file_path: str | Path) -> str:
    path = Path(file_path)
    if not path.is_file():
        LOGGER.error("Config file not found: %s", file_path)
        raise ConfigParseError(str(file_path), "file not found")

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.error("Config file could not be read: %s", file_path)
        raise ConfigParseError(str(file_path), str(exc)) from exc


def load_json(file_path: str | Path) -> Any:
    """Read a JSON document from disk."""
    content = _read_text(file_path)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        LOGGER.error("Config file is not valid JSON: %s", file_path)
        raise ConfigParseError(str(file_path), f"invalid JSON ({exc})") from exc

    LOGGER.info("Loaded JSON from %s", file_path)
    return data


def load_typed(file_path: str | Path, model: type[ModelT]) -> ModelT:
    """Read a JSON document from disk and validate it into ``model``."""
    data = load_json(file_path)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        LOGGER.error("File %s does not match the %s shape", file_path, model.__name__)
        raise ConfigParseError(str(file_path), f"does not match {model.__name__}: {exc}") from exc
