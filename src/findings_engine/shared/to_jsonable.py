from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from typing import Any, Mapping


def to_jsonable(obj: Any) -> Any:
    """Convert domain objects to JSON-serializable values.

    Handles:
    - Basic types (str, int, float, bool, None)
    - datetime/date (ISO 8601 string)
    - Collections (list, tuple, set, any Mapping)
    - Objects with a to_jsonable method (checked before dataclasses)
    - Pydantic models
    - Dataclasses, field by field
    - Bytes/Bytearray

    Args:
        obj: Any Python object

    Returns:
        A JSON-serializable version of the object
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray)):
        return obj.hex()
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(to_jsonable(item) for item in obj)
    if hasattr(obj, "to_jsonable"):
        return to_jsonable(obj.to_jsonable())
    if hasattr(obj, "model_dump"):
        return to_jsonable(obj.model_dump())
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if hasattr(obj, "__dict__"):
        return to_jsonable(vars(obj))
    return str(obj)
