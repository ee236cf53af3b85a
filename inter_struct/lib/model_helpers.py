"""
Helper functions for reading and writing fields of live objects.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any, Type

from pydantic import BaseModel


def is_pydantic_model(model_class: Type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    try:
        return (
            isinstance(model_class, type)
            and issubclass(model_class, BaseModel)
            and hasattr(model_class, "model_fields")
        )
    except TypeError:
        return False


def get_value(obj: Any, name: str) -> Any:
    """Read a field from an object or a mapping."""
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def set_value(obj: Any, name: str, value: Any) -> None:
    """Write a field on an object or a mutable mapping."""
    if isinstance(obj, MutableMapping):
        obj[name] = value
    else:
        setattr(obj, name, value)


def build(target_cls: Type, values: dict[str, Any]) -> Any:
    """Construct a target from keyword values; pydantic models are validated."""
    if is_pydantic_model(target_cls):
        return target_cls.model_validate(values)
    return target_cls(**values)
