"""
Conversion between entity dataclasses and their stored JSON records.

Stored records use camelCase keys (e.g., "resumeVersionId"); dataclass fields
use snake_case and declare the stored key in field metadata:

    resume_version_id: Optional[str] = field(default=None, metadata={"key": "resumeVersionId"})

Fields holding None are left out of the stored record, which is how optional
fields were always persisted.
"""

import copy
from dataclasses import fields
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T")


def stored_key(f) -> str:
    """Stored record key for a dataclass field."""
    return f.metadata.get("key", f.name)


def record_to_dict(record: Any) -> Dict[str, Any]:
    """
    Serialize an entity dataclass to its stored record.

    Lists and dicts are copied, so the result can be mutated freely.
    """
    data = {}
    for f in fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue
        data[stored_key(f)] = copy.deepcopy(value)
    return data


def record_from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
    """
    Build an entity dataclass from a stored record.

    Keys the dataclass does not know are ignored.

    Raises:
        ValueError: If data is not a dict or a required field is missing
    """
    if not isinstance(data, dict):
        raise ValueError(f"{cls.__name__} record must be a dict, got {type(data).__name__}")

    kwargs = {}
    for f in fields(cls):
        key = stored_key(f)
        if key in data:
            kwargs[f.name] = copy.deepcopy(data[key])

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid {cls.__name__} record (id={data.get('id')!r}): {e}") from e
