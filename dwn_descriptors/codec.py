"""Wire encodings for DWN messages and descriptors."""

from __future__ import annotations

import json
import pathlib
from typing import Any

from .utils import canonical_json_bytes

try:
    import cbor2
except Exception:  # pragma: no cover - optional dependency
    cbor2 = None


class CodecError(ValueError):
    """Raised when bytes can not be read as a message object, or written back."""


SUPPORTED_ENCODINGS = ("json", "cbor")

_SUFFIX_ENCODINGS = {".json": "json", ".cbor": "cbor"}


def has_cbor_support() -> bool:
    return cbor2 is not None


def _require_cbor() -> None:
    if cbor2 is None:
        raise CodecError("CBOR support unavailable: install 'cbor2'")


def _load(data: bytes, encoding: str) -> Any:
    if encoding == "json":
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CodecError(f"invalid JSON: {exc}") from exc
    if encoding == "cbor":
        _require_cbor()
        try:
            return cbor2.loads(data)
        except cbor2.CBORDecodeError as exc:
            raise CodecError(f"invalid CBOR: {exc}") from exc
    raise CodecError(f"unsupported encoding: {encoding}")


def decode_document(data: bytes, encoding: str = "json") -> dict[str, Any]:
    """Decode a top-level object: a bare descriptor or a FeatureDetection document."""
    decoded = _load(data, encoding)
    if not isinstance(decoded, dict):
        raise CodecError(f"top-level {encoding} value must be an object")
    return decoded


def decode_message(data: bytes, encoding: str = "json") -> dict[str, Any]:
    """Decode a wire message.

    A present ``descriptor`` member must itself be an object. Its absence is
    left to :func:`~dwn_descriptors.validator.validate_message`, which reports
    it as ``MissingField``.
    """
    message = decode_document(data, encoding)
    if "descriptor" in message and not isinstance(message["descriptor"], dict):
        raise CodecError("message descriptor must be an object")
    return message


def encode_document(document: dict[str, Any], encoding: str = "json") -> bytes:
    """Deterministic bytes: sorted-key compact JSON, or canonical CBOR."""
    if encoding == "json":
        try:
            return canonical_json_bytes(document)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"failed to encode JSON: {exc}") from exc
    if encoding == "cbor":
        _require_cbor()
        try:
            return cbor2.dumps(document, canonical=True)
        except cbor2.CBOREncodeError as exc:
            raise CodecError(f"failed to encode CBOR: {exc}") from exc
    raise CodecError(f"unsupported encoding: {encoding}")


def detect_encoding_from_path(path: str) -> str:
    return _SUFFIX_ENCODINGS.get(pathlib.Path(path).suffix.lower(), "json")
