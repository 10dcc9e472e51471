"""CLI entrypoint for dwn-descriptors."""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import Any

from .codec import (
    CodecError,
    SUPPORTED_ENCODINGS,
    decode_document,
    decode_message,
    detect_encoding_from_path,
    encode_document,
)
from .conformance import render_conformance_json, render_conformance_text, run_conformance_suite
from .constants import SUPPORTED_METHODS
from .features import build_feature_detection
from .policy import DEFAULT_POLICY, ValidationPolicy, parse_validation_policy
from .schema import json_schema_bundle, resolve_schema, schema_fingerprint, to_json_schema
from .utils import json_dumps_pretty
from .validator import validate, validate_message

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="dwnd", description="Decentralized web node descriptor tools")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subparsers.add_parser("validate", help="Validate a message or descriptor file")
    validate_cmd.add_argument("--in-file", required=True, help="Message file path (.json or .cbor)")
    validate_cmd.add_argument(
        "--encoding",
        choices=list(SUPPORTED_ENCODINGS),
        help="Input encoding (default: detected from the file extension)",
    )
    validate_cmd.add_argument("--method", choices=list(SUPPORTED_METHODS), help="Expected descriptor method")
    validate_cmd.add_argument("--policy-file", help="JSON validation policy")
    validate_cmd.add_argument(
        "--descriptor-only",
        action="store_true",
        help="Treat the file as a bare descriptor instead of a message with a descriptor member",
    )
    validate_cmd.add_argument(
        "--out-file",
        help="Write the normalized result here (.json or .cbor) instead of printing it",
    )
    validate_cmd.set_defaults(func=_cmd_validate)

    schema_cmd = subparsers.add_parser("schema", help="Print descriptor schemas as JSON Schema")
    schema_cmd.add_argument("--method", choices=list(SUPPORTED_METHODS), help="Single method to export")
    schema_cmd.set_defaults(func=_cmd_schema)

    features_cmd = subparsers.add_parser("features", help="Print a FeatureDetection document")
    features_cmd.add_argument(
        "--method",
        action="append",
        default=[],
        help="Supported method (repeatable, default: all)",
    )
    features_cmd.add_argument("--no-batching", action="store_true", help="Advertise no message batching")
    features_cmd.set_defaults(func=_cmd_features)

    conformance_cmd = subparsers.add_parser("conformance", help="Run the descriptor conformance suite")
    conformance_cmd.add_argument(
        "--category",
        action="append",
        default=[],
        help="Case category: golden, negative, concurrency or all (repeatable)",
    )
    conformance_cmd.add_argument("--format", choices=["text", "json"], default="text")
    conformance_cmd.set_defaults(func=_cmd_conformance)

    args = parser.parse_args(argv)
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, args.log_level))
    return args.func(args)


def _cmd_validate(args: argparse.Namespace) -> int:
    policy = DEFAULT_POLICY
    if args.policy_file:
        try:
            policy = _load_policy(args.policy_file)
        except (OSError, ValueError) as exc:
            print(f"failed to load validation policy: {exc}", file=sys.stderr)
            return 2

    encoding = args.encoding or detect_encoding_from_path(args.in_file)
    decode = decode_document if args.descriptor_only else decode_message
    try:
        raw = pathlib.Path(args.in_file).read_bytes()
        document = decode(raw, encoding=encoding)
    except (OSError, CodecError) as exc:
        print(f"failed to read {args.in_file}: {exc}", file=sys.stderr)
        return 2

    if args.descriptor_only:
        result = validate(args.method, document, policy=policy)
    else:
        result = validate_message(document, method_hint=args.method, policy=policy)

    if result.error is not None:
        logger.info("%s rejected: %s", args.in_file, result.error)
        print(json_dumps_pretty(result.error.to_dict()), file=sys.stderr)
        return 1

    assert result.value is not None
    if args.out_file:
        out_encoding = detect_encoding_from_path(args.out_file)
        try:
            pathlib.Path(args.out_file).write_bytes(encode_document(result.value, encoding=out_encoding))
        except (OSError, CodecError) as exc:
            print(f"failed to write {args.out_file}: {exc}", file=sys.stderr)
            return 2
        return 0

    print(json_dumps_pretty(result.value))
    return 0


def _cmd_schema(args: argparse.Namespace) -> int:
    output: dict[str, Any]
    if args.method:
        schema = resolve_schema(args.method)
        if schema is None:
            print(f"unknown method: {args.method}", file=sys.stderr)
            return 2
        output = to_json_schema(schema)
    else:
        output = {"fingerprint": schema_fingerprint(), "schemas": json_schema_bundle()}
    print(json_dumps_pretty(output))
    return 0


def _cmd_features(args: argparse.Namespace) -> int:
    try:
        document = build_feature_detection(args.method or None, batching=not args.no_batching)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    print(json_dumps_pretty(document))
    return 0


def _cmd_conformance(args: argparse.Namespace) -> int:
    try:
        report = run_conformance_suite(categories=args.category or None)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if args.format == "json":
        print(render_conformance_json(report))
    else:
        print(render_conformance_text(report))
    return 0 if report["passed"] else 1


def _load_policy(path: str) -> ValidationPolicy:
    raw = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    return parse_validation_policy(raw)


if __name__ == "__main__":
    raise SystemExit(main())
