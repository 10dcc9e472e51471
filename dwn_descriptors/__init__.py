"""Descriptor validation for decentralized web node messages."""

from .codec import CodecError, decode_document, decode_message, encode_document
from .conformance import minimal_descriptor, render_conformance_json, render_conformance_text, run_conformance_suite
from .errors import DescriptorValidationError, ValidationError
from .features import build_feature_detection, supports_batching, supports_method, validate_feature_detection
from .fields import FieldSpec
from .policy import DEFAULT_POLICY, ValidationPolicy, parse_validation_policy
from .rules import evaluate_rules
from .schema import (
    DEFAULT_REGISTRY,
    Schema,
    SchemaRegistry,
    json_schema_bundle,
    resolve_schema,
    schema_fingerprint,
    to_json_schema,
)
from .validator import (
    ValidationResult,
    descriptor_digest,
    validate,
    validate_message,
    validate_or_raise,
)

__all__ = [
    "CodecError",
    "decode_document",
    "decode_message",
    "encode_document",
    "minimal_descriptor",
    "run_conformance_suite",
    "render_conformance_text",
    "render_conformance_json",
    "DescriptorValidationError",
    "ValidationError",
    "build_feature_detection",
    "supports_batching",
    "supports_method",
    "validate_feature_detection",
    "FieldSpec",
    "DEFAULT_POLICY",
    "ValidationPolicy",
    "parse_validation_policy",
    "evaluate_rules",
    "DEFAULT_REGISTRY",
    "Schema",
    "SchemaRegistry",
    "json_schema_bundle",
    "resolve_schema",
    "schema_fingerprint",
    "to_json_schema",
    "ValidationResult",
    "descriptor_digest",
    "validate",
    "validate_message",
    "validate_or_raise",
]

__version__ = "0.1.0"
