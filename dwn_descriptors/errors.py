"""Validation error values and the exception wrapper around them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .constants import (
    CROSS_FIELD_VIOLATION,
    INVALID_FORMAT,
    METHOD_MISMATCH,
    MISSING_FIELD,
    NOT_IN_ENUM,
    UNKNOWN_FIELD,
    UNKNOWN_METHOD,
    WRONG_TYPE,
)


@dataclass(frozen=True, slots=True)
class ValidationError:
    """First violation found in a descriptor.

    Instances are plain values: two validations of the same input compare equal.
    """

    kind: str
    field: str | None = None
    value: Any = None
    rule: str | None = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.field is not None:
            data["field"] = self.field
        if self.kind in {NOT_IN_ENUM, UNKNOWN_METHOD, METHOD_MISMATCH}:
            data["value"] = self.value
        if self.rule is not None:
            data["rule"] = self.rule
        return data

    def __str__(self) -> str:
        target = self.rule or self.field
        if target:
            return f"{self.kind}({target}): {self.message}"
        return f"{self.kind}: {self.message}"


class DescriptorValidationError(ValueError):
    """Raised by the raising helpers when a descriptor is rejected."""

    def __init__(self, error: ValidationError) -> None:
        super().__init__(str(error))
        self.error = error


def unknown_method(value: Any) -> ValidationError:
    if value is None:
        message = "descriptor has no method"
    else:
        message = f"unknown method: {value!r}"
    return ValidationError(UNKNOWN_METHOD, field="method", value=value, message=message)


def method_mismatch(expected: str, actual: str) -> ValidationError:
    return ValidationError(
        METHOD_MISMATCH,
        field="method",
        value=actual,
        message=f"expected method {expected!r}, descriptor declares {actual!r}",
    )


def missing_field(name: str) -> ValidationError:
    return ValidationError(MISSING_FIELD, field=name, message=f"missing required field '{name}'")


def wrong_type(name: str, expected: str) -> ValidationError:
    return ValidationError(WRONG_TYPE, field=name, message=f"{name} must be {expected}")


def invalid_format(name: str, expected: str) -> ValidationError:
    return ValidationError(INVALID_FORMAT, field=name, message=f"{name} must be {expected}")


def not_in_enum(name: str, value: Any, allowed: tuple[str, ...]) -> ValidationError:
    return ValidationError(
        NOT_IN_ENUM,
        field=name,
        value=value,
        message=f"{name} must be one of {list(allowed)!r}",
    )


def cross_field_violation(rule: str, message: str, *, field: str | None = None) -> ValidationError:
    return ValidationError(CROSS_FIELD_VIOLATION, field=field, rule=rule, message=message)


def unknown_field(name: str) -> ValidationError:
    return ValidationError(UNKNOWN_FIELD, field=name, message=f"field '{name}' is not part of the schema")
