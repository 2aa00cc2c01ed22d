from enum import Enum
from typing import Any, Dict
from pydantic import BaseModel


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def to_document(model: BaseModel) -> Dict[str, Any]:
    """Model as a Mongo document, with enums stored as their values."""
    return _plain(model.dict())

