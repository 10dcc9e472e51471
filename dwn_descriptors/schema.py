"""Descriptor schemas, the schema registry and JSON Schema export."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from jsonschema import Draft202012Validator

from .constants import (
    DATE_SORT_VALUES,
    INTERFACES,
    RULE_METHOD_LITERAL,
    RULE_PUBLICATION,
    RULE_SCOPE_IDENTIFIER,
)
from .fields import (
    BOOLEAN,
    CONDITIONS,
    ENUM,
    NESTED_FIELDS,
    SCOPE,
    STRING,
    TIMESTAMP,
    URI,
    UUID4,
    FieldSpec,
    optional,
    required,
)
from .utils import canonical_json_bytes, sha256_prefixed

logger = logging.getLogger(__name__)

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
JSON_SCHEMA_ID_PREFIX = "urn:dwn-descriptors:schema:"


@dataclass(frozen=True, slots=True)
class Schema:
    """Shape of one method's descriptor.

    ``fields`` is ordered: required-field and field-check errors are reported
    in declaration order. ``rules`` names the cross-field rules evaluated, in
    order, once every field passed its own check.
    """

    method: str
    fields: Mapping[str, FieldSpec]
    rules: tuple[str, ...] = (RULE_METHOD_LITERAL,)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(name for name, spec in self.fields.items() if spec.required)


def _schema(method: str, fields: dict[str, FieldSpec], *, rules: tuple[str, ...] = ()) -> Schema:
    declared: dict[str, FieldSpec] = {"method": required(STRING), "nonce": optional(STRING)}
    declared.update(fields)
    return Schema(
        method=method,
        fields=MappingProxyType(declared),
        rules=(RULE_METHOD_LITERAL, *rules),
    )


_PERMISSION_RULES = (RULE_SCOPE_IDENTIFIER, RULE_PUBLICATION)

BUILTIN_SCHEMAS: tuple[Schema, ...] = (
    _schema(
        "CollectionsQuery",
        {
            "schema": optional(URI),
            "recordId": optional(UUID4),
            "dataFormat": optional(STRING),
            "dateSort": optional(ENUM, choices=DATE_SORT_VALUES),
        },
    ),
    _schema(
        "CollectionsWrite",
        {
            "recordId": required(UUID4),
            "schema": optional(URI),
            "published": optional(BOOLEAN),
            "dateCreated": required(TIMESTAMP),
            "datePublished": optional(TIMESTAMP),
        },
    ),
    _schema(
        "CollectionsCommit",
        {
            "recordId": required(UUID4),
            "schema": optional(URI),
            "dateCreated": required(TIMESTAMP),
            "datePublished": optional(TIMESTAMP),
        },
    ),
    _schema("CollectionsDelete", {"recordId": required(UUID4)}),
    _schema("ThreadsQuery", {"threadId": optional(UUID4)}),
    _schema(
        "ThreadsCreate",
        {
            "threadId": required(UUID4),
            "threadType": required(URI),
            "schema": required(URI),
            "published": optional(BOOLEAN),
        },
    ),
    _schema(
        "ThreadsReply",
        {
            "threadId": required(UUID4),
            "parentId": required(UUID4),
            "schema": required(URI),
        },
    ),
    _schema("ThreadsClose", {"threadId": required(UUID4)}),
    _schema("ThreadsDelete", {"threadId": required(UUID4)}),
    _schema(
        "PermissionsRequest",
        {
            "grantedBy": required(URI),
            "grantedTo": required(URI),
            "description": optional(STRING),
            "scope": required(SCOPE),
            "conditions": optional(CONDITIONS),
        },
        rules=_PERMISSION_RULES,
    ),
    _schema(
        "PermissionsGrant",
        {
            "permissionGrantId": required(UUID4),
            "permissionRequestId": optional(UUID4),
            "grantedBy": required(URI),
            "grantedTo": required(URI),
            "delegatedFrom": optional(UUID4),
            "expiry": required(TIMESTAMP),
            "description": optional(STRING),
            "scope": required(SCOPE),
            "conditions": optional(CONDITIONS),
        },
        rules=_PERMISSION_RULES,
    ),
    _schema(
        "PermissionsQuery",
        {
            "permissionRequestId": optional(UUID4),
            "permissionGrantId": optional(UUID4),
            "permissionRevokeId": optional(UUID4),
            "grantedBy": optional(URI),
            "grantedTo": optional(URI),
            "delegatedFrom": optional(UUID4),
            "scope": optional(SCOPE),
        },
        rules=(RULE_SCOPE_IDENTIFIER,),
    ),
)


class SchemaRegistry:
    """Immutable lookup from method literal to :class:`Schema`."""

    def __init__(self, schemas: Iterable[Schema]) -> None:
        table: dict[str, Schema] = {}
        for schema in schemas:
            if schema.method in table:
                raise ValueError(f"duplicate schema for method: {schema.method}")
            table[schema.method] = schema
        self._table = MappingProxyType(table)
        logger.debug("schema registry loaded %d methods", len(table))

    def resolve(self, method: Any) -> Schema | None:
        if not isinstance(method, str):
            return None
        return self._table.get(method)

    def methods(self) -> tuple[str, ...]:
        return tuple(self._table)

    def interface_of(self, method: str) -> str | None:
        if method not in self._table:
            return None
        for interface, methods in INTERFACES.items():
            if method in methods:
                return interface
        return None

    def supports_publication(self, method: str) -> bool:
        schema = self.resolve(method)
        return schema is not None and "published" in schema.fields

    def __contains__(self, method: object) -> bool:
        return method in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[Schema]:
        return iter(self._table.values())


DEFAULT_REGISTRY = SchemaRegistry(BUILTIN_SCHEMAS)


def resolve_schema(method: Any) -> Schema | None:
    return DEFAULT_REGISTRY.resolve(method)


def to_json_schema(schema: Schema) -> dict[str, Any]:
    """Render a descriptor schema as a Draft 2020-12 JSON Schema document.

    Cross-field rules JSON Schema can express (``scope.identifier`` needs
    ``scope.schema``) are encoded with ``dependentRequired``; the publication
    rule needs the registry and is only noted in ``$comment``.
    """
    properties: dict[str, Any] = {}
    for name, spec in schema.fields.items():
        if name == "method":
            properties[name] = {"const": schema.method}
        else:
            properties[name] = _json_schema_for_field(spec)

    document: dict[str, Any] = {
        "$schema": JSON_SCHEMA_DIALECT,
        "$id": f"{JSON_SCHEMA_ID_PREFIX}{schema.method}",
        "title": f"{schema.method} descriptor",
        "type": "object",
        "required": list(schema.required_fields),
        "properties": properties,
        "additionalProperties": False,
    }
    if RULE_PUBLICATION in schema.rules:
        document["$comment"] = "conditions.publication=true requires a scope method with a published field"
    Draft202012Validator.check_schema(document)
    return document


def _json_schema_for_field(spec: FieldSpec) -> dict[str, Any]:
    if spec.kind == UUID4:
        return {
            "type": "string",
            "pattern": "^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-4[0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$",
        }
    if spec.kind == URI:
        return {"type": "string", "format": "uri"}
    if spec.kind == TIMESTAMP:
        return {"type": "integer", "minimum": 0}
    if spec.kind == ENUM:
        return {"type": "string", "enum": list(spec.choices)}
    if spec.kind == BOOLEAN:
        return {"type": "boolean"}
    if spec.kind == STRING:
        return {"type": "string"}

    members = NESTED_FIELDS[spec.kind]
    nested: dict[str, Any] = {
        "type": "object",
        "required": [name for name, member in members.items() if member.required],
        "properties": {name: _json_schema_for_field(member) for name, member in members.items()},
        "additionalProperties": False,
    }
    if spec.kind == SCOPE:
        nested["dependentRequired"] = {"identifier": ["schema"]}
    return nested


def json_schema_bundle(registry: SchemaRegistry = DEFAULT_REGISTRY) -> dict[str, dict[str, Any]]:
    return {schema.method: to_json_schema(schema) for schema in registry}


def schema_fingerprint(registry: SchemaRegistry = DEFAULT_REGISTRY) -> str:
    """Stable hash of the exported schema bundle, for comparing deployments."""
    return sha256_prefixed(canonical_json_bytes(json_schema_bundle(registry)))
