"""FeatureDetection documents.

A node advertises which interface methods it implements with a document of
the form::

    {
        "type": "FeatureDetection",
        "interfaces": {
            "collections": {"CollectionsQuery": true, ...},
            "actions": {"ThreadsQuery": true, ...},
            "permissions": {"PermissionsRequest": true, ...},
            "messaging": {"batching": true}
        }
    }

A ``false`` value or the omission of a method means the method is not
supported. An absent ``messaging.batching`` means batching IS supported.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .constants import COLLECTIONS_METHODS, PERMISSIONS_METHODS, THREADS_METHODS
from .errors import missing_field, not_in_enum, unknown_field, wrong_type
from .schema import DEFAULT_REGISTRY, SchemaRegistry
from .validator import ValidationResult, reject

FEATURE_DETECTION_TYPE = "FeatureDetection"

FEATURE_INTERFACES: dict[str, tuple[str, ...]] = {
    "collections": COLLECTIONS_METHODS,
    "actions": THREADS_METHODS,
    "permissions": PERMISSIONS_METHODS + ("PermissionsRevoke",),
}
MESSAGING_FIELDS = ("batching",)


def build_feature_detection(
    supported: Iterable[str] | None = None,
    *,
    batching: bool = True,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dict[str, Any]:
    """Build a document advertising ``supported`` (every registered method when None)."""
    selected = set(registry.methods() if supported is None else supported)
    known = {method for methods in FEATURE_INTERFACES.values() for method in methods}
    unknown = sorted(selected - known)
    if unknown:
        raise ValueError(f"unknown interface methods: {unknown}")

    interfaces: dict[str, Any] = {}
    for interface, methods in FEATURE_INTERFACES.items():
        interfaces[interface] = {method: True for method in methods if method in selected}
    interfaces["messaging"] = {"batching": bool(batching)}
    return {"type": FEATURE_DETECTION_TYPE, "interfaces": interfaces}


def validate_feature_detection(document: Any) -> ValidationResult:
    if not isinstance(document, Mapping):
        return reject(wrong_type("featureDetection", "an object"))

    for name in ("type", "interfaces"):
        if name not in document:
            return reject(missing_field(name))

    doc_type = document["type"]
    if not isinstance(doc_type, str):
        return reject(wrong_type("type", "a string"))
    if doc_type != FEATURE_DETECTION_TYPE:
        return reject(not_in_enum("type", doc_type, (FEATURE_DETECTION_TYPE,)))

    interfaces = document["interfaces"]
    if not isinstance(interfaces, Mapping):
        return reject(wrong_type("interfaces", "an object"))

    allowed_members: dict[str, tuple[str, ...]] = dict(FEATURE_INTERFACES)
    allowed_members["messaging"] = MESSAGING_FIELDS

    normalized_interfaces: dict[str, Any] = {}
    for interface, members in allowed_members.items():
        if interface not in interfaces:
            continue
        path = f"interfaces.{interface}"
        flags = interfaces[interface]
        if not isinstance(flags, Mapping):
            return reject(wrong_type(path, "an object"))
        normalized_flags: dict[str, bool] = {}
        for member in members:
            if member not in flags:
                continue
            if not isinstance(flags[member], bool):
                return reject(wrong_type(f"{path}.{member}", "a boolean"))
            normalized_flags[member] = flags[member]
        extra = sorted(str(key) for key in flags if key not in members)
        if extra:
            return reject(unknown_field(f"{path}.{extra[0]}"))
        normalized_interfaces[interface] = normalized_flags

    extra = sorted(str(key) for key in interfaces if key not in allowed_members)
    if extra:
        return reject(unknown_field(f"interfaces.{extra[0]}"))

    extra = sorted(str(key) for key in document if key not in {"type", "interfaces"})
    if extra:
        return reject(unknown_field(extra[0]))

    return ValidationResult(value={"type": FEATURE_DETECTION_TYPE, "interfaces": normalized_interfaces})


def supports_method(document: Mapping[str, Any], method: str) -> bool:
    interfaces = document.get("interfaces")
    if not isinstance(interfaces, Mapping):
        return False
    for interface, methods in FEATURE_INTERFACES.items():
        if method in methods:
            flags = interfaces.get(interface)
            return isinstance(flags, Mapping) and flags.get(method) is True
    return False


def supports_batching(document: Mapping[str, Any]) -> bool:
    interfaces = document.get("interfaces")
    messaging = interfaces.get("messaging") if isinstance(interfaces, Mapping) else None
    if not isinstance(messaging, Mapping) or "batching" not in messaging:
        return True
    return messaging["batching"] is True
