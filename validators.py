from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union
import shlex


T = TypeVar("T")
Number = TypeVar("Number", int, float)


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T]
    error: Optional[str]

    @property
    def is_valid(self) -> bool:
        return self.error is None


def _validate_number(
    value: str | None,
    convert: Callable[[str], Number],
    kind: str,
    default: Optional[Number],
    name: str,
    min_value: Union[int, float, None],
) -> ValidationResult[Number]:
    text = (value or "").strip()
    if not text:
        if default is None:
            return ValidationResult(None, f"{name} must be provided")
        return ValidationResult(default, None)
    try:
        parsed = convert(text)
    except ValueError:
        return ValidationResult(None, f"{name} must be {kind}")
    if min_value is not None and parsed < min_value:
        return ValidationResult(None, f"{name} must be >= {min_value}")
    return ValidationResult(parsed, None)


def validate_int(
    value: str | None,
    *,
    default: Optional[int] = None,
    name: str = "value",
    min_value: Optional[int] = None,
) -> ValidationResult[int]:
    return _validate_number(value, int, "an integer", default, name, min_value)


def validate_float(
    value: str | None,
    *,
    default: Optional[float] = None,
    name: str = "value",
    min_value: Optional[float] = None,
) -> ValidationResult[float]:
    return _validate_number(value, float, "a number", default, name, min_value)


def split_command(value: str | None, *, default: str, name: str = "command") -> ValidationResult[list[str]]:
    value = (value or "").strip() or default
    try:
        parts = shlex.split(value)
    except ValueError as exc:
        return ValidationResult(None, f"Could not parse {name}: {exc}")
    if not parts:
        return ValidationResult(None, f"{name} must not be empty")
    return ValidationResult(parts, None)
