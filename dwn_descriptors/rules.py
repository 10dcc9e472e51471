"""Cross-field rules evaluated after every field passed its own check."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .constants import RULE_METHOD_LITERAL, RULE_PUBLICATION, RULE_SCOPE_IDENTIFIER
from .errors import ValidationError, cross_field_violation
from .schema import DEFAULT_REGISTRY, Schema, SchemaRegistry

RuleFn = Callable[[Mapping[str, Any], Schema, SchemaRegistry], ValidationError | None]


def _method_literal(descriptor: Mapping[str, Any], schema: Schema, registry: SchemaRegistry) -> ValidationError | None:
    if descriptor.get("method") != schema.method:
        return cross_field_violation(
            RULE_METHOD_LITERAL,
            f"method must be the literal {schema.method!r}",
            field="method",
        )
    return None


def _scope_identifier_requires_schema(
    descriptor: Mapping[str, Any],
    schema: Schema,
    registry: SchemaRegistry,
) -> ValidationError | None:
    scope = descriptor.get("scope")
    if not isinstance(scope, Mapping):
        return None
    if "identifier" in scope and "schema" not in scope:
        return cross_field_violation(
            RULE_SCOPE_IDENTIFIER,
            "scope.identifier requires scope.schema",
            field="scope.identifier",
        )
    return None


def _publication_requires_publishable_method(
    descriptor: Mapping[str, Any],
    schema: Schema,
    registry: SchemaRegistry,
) -> ValidationError | None:
    conditions = descriptor.get("conditions")
    if not isinstance(conditions, Mapping) or conditions.get("publication") is not True:
        return None
    scope = descriptor.get("scope")
    scope_method = scope.get("method") if isinstance(scope, Mapping) else None
    if isinstance(scope_method, str) and registry.supports_publication(scope_method):
        return None
    return cross_field_violation(
        RULE_PUBLICATION,
        f"conditions.publication is not allowed for method {scope_method!r}",
        field="conditions.publication",
    )


RULES: dict[str, RuleFn] = {
    RULE_METHOD_LITERAL: _method_literal,
    RULE_SCOPE_IDENTIFIER: _scope_identifier_requires_schema,
    RULE_PUBLICATION: _publication_requires_publishable_method,
}


def evaluate_rules(
    descriptor: Mapping[str, Any],
    schema: Schema,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> ValidationError | None:
    """Run ``schema.rules`` in order and return the first violation."""
    for rule_id in schema.rules:
        error = RULES[rule_id](descriptor, schema, registry)
        if error is not None:
            return error
    return None
