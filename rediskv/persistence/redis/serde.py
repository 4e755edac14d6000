from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ...core.errors import SerializationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _default_handler(obj: Any) -> Any:
    """Handle values the json module does not know about"""
    if isinstance(obj, datetime | date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, set | frozenset):
        return sorted(obj, key=repr)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(obj: Any) -> str:
    """
    Serialize a Python object to the JSON text stored under a key.

    Pydantic models go through ``model_dump_json``; everything else through
    ``json.dumps`` with datetime/enum/set support.

    Raises:
        SerializationError: If the value cannot be represented as JSON.
    """
    if isinstance(obj, BaseModel):
        try:
            return obj.model_dump_json()
        except (ValueError, TypeError) as e:
            raise SerializationError(
                f"Could not serialize {type(obj).__name__}: {e}"
            ) from e
    try:
        return json.dumps(obj, ensure_ascii=False, default=_default_handler)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Could not serialize value of type {type(obj).__name__}: {e}"
        ) from e


def loads(raw: str | bytes, model: type[ModelT] | None = None) -> Any:
    """
    Deserialize stored JSON text back to a Python object.

    Args:
        raw: Text fetched from the store
        model: Optional BaseModel class to validate the payload into

    Raises:
        SerializationError: If the text is not JSON or does not match ``model``.
    """
    try:
        if model is not None:
            return model.model_validate_json(raw)
        return json.loads(raw)
    except ValidationError as e:
        raise SerializationError(
            f"Stored value does not match {model.__name__}: {e.error_count()} error(s)"
        ) from e
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise SerializationError(f"Stored value is not valid JSON: {e}") from e
