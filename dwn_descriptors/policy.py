"""Validation policy configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

UNKNOWN_FIELD_MODES = {"reject", "ignore"}


@dataclass(frozen=True, slots=True)
class ValidationPolicy:
    """Knobs for behaviour the protocol leaves to implementations.

    ``unknown_fields`` decides what happens to members outside a schema's
    declared set: ``"reject"`` fails validation with ``UnknownField``,
    ``"ignore"`` drops them from the normalized descriptor.
    """

    unknown_fields: str = "reject"
    accept_enum_aliases: bool = True
    fill_condition_defaults: bool = True

    def __post_init__(self) -> None:
        if self.unknown_fields not in UNKNOWN_FIELD_MODES:
            raise ValueError("unknown_fields must be 'reject' or 'ignore'")

    @property
    def reject_unknown(self) -> bool:
        return self.unknown_fields == "reject"


DEFAULT_POLICY = ValidationPolicy()


def parse_validation_policy(raw: dict[str, Any]) -> ValidationPolicy:
    """Parse a validation policy from a JSON-compatible mapping."""
    if not isinstance(raw, dict):
        raise ValueError("validation policy must be an object")

    known = {"unknown_fields", "accept_enum_aliases", "fill_condition_defaults"}
    extra = sorted(set(raw) - known)
    if extra:
        raise ValueError(f"unsupported validation policy keys: {extra}")

    unknown_fields = raw.get("unknown_fields", DEFAULT_POLICY.unknown_fields)
    accept_aliases = raw.get("accept_enum_aliases", DEFAULT_POLICY.accept_enum_aliases)
    fill_defaults = raw.get("fill_condition_defaults", DEFAULT_POLICY.fill_condition_defaults)

    if not isinstance(unknown_fields, str) or unknown_fields not in UNKNOWN_FIELD_MODES:
        raise ValueError("unknown_fields must be 'reject' or 'ignore'")
    if not isinstance(accept_aliases, bool):
        raise ValueError("accept_enum_aliases must be a boolean")
    if not isinstance(fill_defaults, bool):
        raise ValueError("fill_condition_defaults must be a boolean")

    return ValidationPolicy(
        unknown_fields=unknown_fields,
        accept_enum_aliases=accept_aliases,
        fill_condition_defaults=fill_defaults,
    )
