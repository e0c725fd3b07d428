"""Parse-or-default handling for model output that should be JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from sahay.libs.json_utils import extract_json_block

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Fallback(Generic[T]):
    value: T
    reason: str

    @property
    def ok(self) -> bool:
        return False


Parsed = Union[Ok[T], Fallback[T]]


def parse_or_default(
    text: str | None,
    schema: type[T] | Any,
    default: T | Callable[[], T],
) -> Parsed[T]:
    """Validate ``text`` against ``schema`` or hand back ``default``.

    ``schema`` may be a pydantic model or any type understood by ``TypeAdapter``
    (``list[str]``, ``dict[str, Any]``...). Never raises.
    """

    def _default() -> T:
        return default() if callable(default) else default

    if not text or not text.strip():
        return Fallback(_default(), "empty response")

    candidate = extract_json_block(text)
    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, TypeError) as exc:
        return Fallback(_default(), f"invalid JSON: {exc}")

    try:
        if get_origin(schema) is None and isinstance(schema, type) and issubclass(schema, BaseModel):
            return Ok(schema.model_validate(data))
        return Ok(TypeAdapter(schema).validate_python(data))
    except ValidationError as exc:
        return Fallback(_default(), f"schema mismatch: {exc.error_count()} error(s)")


__all__ = ["Fallback", "Ok", "Parsed", "parse_or_default"]
