"""Descriptor validation entry points."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import (
    DescriptorValidationError,
    ValidationError,
    method_mismatch,
    missing_field,
    unknown_field,
    unknown_method,
    wrong_type,
)
from .fields import check_value, normalize_value
from .policy import DEFAULT_POLICY, ValidationPolicy
from .rules import evaluate_rules
from .schema import DEFAULT_REGISTRY, SchemaRegistry
from .utils import canonical_json_bytes, sha256_prefixed

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Either a normalized value or the first violation, never both."""

    value: dict[str, Any] | None = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def reject(error: ValidationError) -> ValidationResult:
    logger.debug("descriptor rejected: %s", error)
    return ValidationResult(error=error)


def validate(
    method_hint: str | None,
    candidate: Any,
    *,
    policy: ValidationPolicy = DEFAULT_POLICY,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> ValidationResult:
    """Validate ``candidate`` against the schema named by its ``method``.

    Checks run in a fixed order and stop at the first violation: method
    resolution, required fields, per-field checks (both in schema declaration
    order), unknown fields (sorted by name), then cross-field rules. On success
    the result holds a new dict with fields in declaration order and values in
    canonical form. ``candidate`` is never modified.
    """
    if not isinstance(candidate, Mapping):
        return reject(wrong_type("descriptor", "an object"))

    method = candidate.get("method")
    if not isinstance(method, str):
        return reject(unknown_method(method))
    if method_hint is not None and method_hint != method:
        return reject(method_mismatch(method_hint, method))

    schema = registry.resolve(method)
    if schema is None:
        return reject(unknown_method(method))

    for name in schema.required_fields:
        if name not in candidate:
            return reject(missing_field(name))

    for name, spec in schema.fields.items():
        if name not in candidate:
            continue
        error = check_value(name, candidate[name], spec, policy)
        if error is not None:
            return reject(error)

    if policy.reject_unknown:
        unknown = sorted(str(key) for key in candidate if key not in schema.fields)
        if unknown:
            return reject(unknown_field(unknown[0]))

    normalized = {
        name: normalize_value(candidate[name], spec, policy)
        for name, spec in schema.fields.items()
        if name in candidate
    }

    error = evaluate_rules(normalized, schema, registry)
    if error is not None:
        return reject(error)
    return ValidationResult(value=normalized)


def validate_or_raise(
    method_hint: str | None,
    candidate: Any,
    *,
    policy: ValidationPolicy = DEFAULT_POLICY,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dict[str, Any]:
    result = validate(method_hint, candidate, policy=policy, registry=registry)
    if result.error is not None:
        raise DescriptorValidationError(result.error)
    assert result.value is not None
    return result.value


def validate_message(
    message: Any,
    *,
    method_hint: str | None = None,
    policy: ValidationPolicy = DEFAULT_POLICY,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> ValidationResult:
    """Validate a wire message: an object carrying a ``descriptor`` member.

    Members other than ``descriptor`` (authorization, attestation, data) are
    copied through untouched; they belong to collaborators outside this package.
    """
    if not isinstance(message, Mapping):
        return reject(wrong_type("message", "an object"))
    if "descriptor" not in message:
        return reject(missing_field("descriptor"))

    result = validate(method_hint, message["descriptor"], policy=policy, registry=registry)
    if result.error is not None:
        return result

    normalized = dict(message)
    normalized["descriptor"] = result.value
    return ValidationResult(value=normalized)


def descriptor_digest(descriptor: Mapping[str, Any]) -> str:
    """``sha256:`` digest of a descriptor's canonical JSON encoding."""
    return sha256_prefixed(canonical_json_bytes(dict(descriptor)))
