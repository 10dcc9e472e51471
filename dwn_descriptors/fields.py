"""Field specifications and per-kind value checkers.

Every checker returns ``None`` when the value is acceptable and a
:class:`~dwn_descriptors.errors.ValidationError` otherwise. Checkers never
raise, so a single bad field can not escape the validator as an exception.

Nested objects (``scope`` and ``conditions``) are described by the same
:class:`FieldSpec` records and report their members with dotted paths such as
``scope.identifier``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from .constants import (
    ATTESTATION_VALUES,
    CONDITION_DEFAULTS,
    ENCRYPTION_VALUES,
    SUPPORTED_METHODS,
)
from .errors import (
    ValidationError,
    invalid_format,
    missing_field,
    not_in_enum,
    unknown_field,
    wrong_type,
)
from .policy import DEFAULT_POLICY, ValidationPolicy

UUID4 = "uuid4"
URI = "uri"
TIMESTAMP = "timestamp"
ENUM = "enum"
BOOLEAN = "boolean"
STRING = "string"
SCOPE = "scope"
CONDITIONS = "conditions"

FIELD_KINDS = {UUID4, URI, TIMESTAMP, ENUM, BOOLEAN, STRING, SCOPE, CONDITIONS}

_UUID4_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}")
_URI_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
_URI_BODY_RE = re.compile(r"(?:[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=]|%[0-9A-Fa-f]{2})+")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class FieldSpec:
    kind: str
    required: bool = False
    choices: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"unknown field kind: {self.kind}")
        if self.kind == ENUM and not self.choices:
            raise ValueError("enum fields need at least one choice")


def required(kind: str, *, choices: tuple[str, ...] = ()) -> FieldSpec:
    return FieldSpec(kind, required=True, choices=choices)


def optional(kind: str, *, choices: tuple[str, ...] = ()) -> FieldSpec:
    return FieldSpec(kind, required=False, choices=choices)


SCOPE_FIELDS: dict[str, FieldSpec] = {
    "method": required(ENUM, choices=SUPPORTED_METHODS),
    "schema": optional(URI),
    "identifier": optional(UUID4),
}

CONDITIONS_FIELDS: dict[str, FieldSpec] = {
    "attestation": optional(ENUM, choices=ATTESTATION_VALUES),
    "encryption": optional(ENUM, choices=ENCRYPTION_VALUES),
    "delegation": optional(BOOLEAN),
    "publication": optional(BOOLEAN),
    "sharedAccess": optional(BOOLEAN),
}

NESTED_FIELDS: dict[str, dict[str, FieldSpec]] = {
    SCOPE: SCOPE_FIELDS,
    CONDITIONS: CONDITIONS_FIELDS,
}


def enum_alias(literal: str) -> str:
    """Upper-snake member name for a literal: ``createdAscending`` -> ``CREATED_ASCENDING``."""
    return _CAMEL_BOUNDARY_RE.sub("_", literal).upper()


def canonical_enum_value(value: str, choices: tuple[str, ...], *, accept_aliases: bool = True) -> str | None:
    if value in choices:
        return value
    if accept_aliases:
        for literal in choices:
            if value == enum_alias(literal):
                return literal
    return None


def is_uuid4(value: Any) -> bool:
    return isinstance(value, str) and _UUID4_RE.fullmatch(value) is not None


def is_uri(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    scheme, sep, rest = value.partition(":")
    if not sep or _URI_SCHEME_RE.fullmatch(scheme) is None:
        return False
    # hier-part may be path-empty, as in "about:".
    if rest and _URI_BODY_RE.fullmatch(rest) is None:
        return False
    try:
        urlsplit(value)
    except ValueError:
        # Unbalanced IPv6 brackets in the authority.
        return False
    return True


def check_value(
    path: str,
    value: Any,
    spec: FieldSpec,
    policy: ValidationPolicy = DEFAULT_POLICY,
) -> ValidationError | None:
    kind = spec.kind
    if kind == UUID4:
        if not isinstance(value, str):
            return wrong_type(path, "a string")
        if not is_uuid4(value):
            return invalid_format(path, "an RFC 4122 version 4 UUID string")
        return None

    if kind == URI:
        if not isinstance(value, str):
            return wrong_type(path, "a string")
        if not is_uri(value):
            return invalid_format(path, "a URI string")
        return None

    if kind == TIMESTAMP:
        if not isinstance(value, int) or isinstance(value, bool):
            return wrong_type(path, "an integer Unix epoch timestamp")
        if value < 0:
            return invalid_format(path, "a non-negative Unix epoch timestamp")
        return None

    if kind == ENUM:
        if not isinstance(value, str):
            return wrong_type(path, "a string")
        if canonical_enum_value(value, spec.choices, accept_aliases=policy.accept_enum_aliases) is None:
            return not_in_enum(path, value, spec.choices)
        return None

    if kind == BOOLEAN:
        if not isinstance(value, bool):
            return wrong_type(path, "a boolean")
        return None

    if kind == STRING:
        if not isinstance(value, str):
            return wrong_type(path, "a string")
        return None

    return _check_object(path, value, NESTED_FIELDS[kind], policy)


def _check_object(
    path: str,
    value: Any,
    members: Mapping[str, FieldSpec],
    policy: ValidationPolicy,
) -> ValidationError | None:
    if not isinstance(value, Mapping):
        return wrong_type(path, "an object")

    for name, spec in members.items():
        if spec.required and name not in value:
            return missing_field(f"{path}.{name}")

    for name, spec in members.items():
        if name not in value:
            continue
        error = check_value(f"{path}.{name}", value[name], spec, policy)
        if error is not None:
            return error

    if policy.reject_unknown:
        unknown = sorted(str(key) for key in value if key not in members)
        if unknown:
            return unknown_field(f"{path}.{unknown[0]}")
    return None


def normalize_value(value: Any, spec: FieldSpec, policy: ValidationPolicy = DEFAULT_POLICY) -> Any:
    """Canonical form of a value that already passed :func:`check_value`."""
    kind = spec.kind
    if kind == ENUM:
        return canonical_enum_value(value, spec.choices, accept_aliases=policy.accept_enum_aliases)
    if kind in NESTED_FIELDS:
        normalized: dict[str, Any] = {}
        for name, member_spec in NESTED_FIELDS[kind].items():
            if name in value:
                normalized[name] = normalize_value(value[name], member_spec, policy)
            elif kind == CONDITIONS and policy.fill_condition_defaults:
                normalized[name] = CONDITION_DEFAULTS[name]
        return normalized
    return value
