"""Descriptor conformance runner."""

from __future__ import annotations

import copy
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Any, Callable, Iterable

from .constants import (
    CROSS_FIELD_VIOLATION,
    INVALID_FORMAT,
    METHOD_MISMATCH,
    MISSING_FIELD,
    NOT_IN_ENUM,
    RULE_PUBLICATION,
    RULE_SCOPE_IDENTIFIER,
    UNKNOWN_FIELD,
    UNKNOWN_METHOD,
)
from .errors import ValidationError
from .schema import DEFAULT_REGISTRY, schema_fingerprint
from .utils import now_iso_utc
from .validator import validate

logger = logging.getLogger(__name__)

CONFORMANCE_VERSION = "v1"
SUPPORTED_CATEGORIES = {"golden", "negative", "concurrency"}

RECORD_ID = "b6464162-84af-4aab-aff5-f1f8438dfc1e"
THREAD_ID = "0fc1f0f6-1d8b-4c8a-9e52-3c1f5e8c7a10"
PARENT_ID = "5e0b0d7c-6a0e-4f4f-8d0a-0b5f2c7b9e31"
GRANT_ID = "9d6b4f0e-2b8f-4a53-bf1e-6a7c8d9e0f12"
SCHEMA_URI = "https://schema.org/SocialMediaPosting"
THREAD_TYPE_URI = "https://schema.org/Conversation"
GRANTOR_DID = "did:example:alice"
GRANTEE_DID = "did:example:bob"

MINIMAL_DESCRIPTORS: dict[str, dict[str, Any]] = {
    "CollectionsQuery": {"method": "CollectionsQuery"},
    "CollectionsWrite": {"method": "CollectionsWrite", "recordId": RECORD_ID, "dateCreated": 1659000000},
    "CollectionsCommit": {"method": "CollectionsCommit", "recordId": RECORD_ID, "dateCreated": 1659000000},
    "CollectionsDelete": {"method": "CollectionsDelete", "recordId": RECORD_ID},
    "ThreadsQuery": {"method": "ThreadsQuery"},
    "ThreadsCreate": {
        "method": "ThreadsCreate",
        "threadId": THREAD_ID,
        "threadType": THREAD_TYPE_URI,
        "schema": SCHEMA_URI,
    },
    "ThreadsReply": {"method": "ThreadsReply", "threadId": THREAD_ID, "parentId": PARENT_ID, "schema": SCHEMA_URI},
    "ThreadsClose": {"method": "ThreadsClose", "threadId": THREAD_ID},
    "ThreadsDelete": {"method": "ThreadsDelete", "threadId": THREAD_ID},
    "PermissionsRequest": {
        "method": "PermissionsRequest",
        "grantedBy": GRANTOR_DID,
        "grantedTo": GRANTEE_DID,
        "scope": {"method": "CollectionsWrite"},
    },
    "PermissionsGrant": {
        "method": "PermissionsGrant",
        "permissionGrantId": GRANT_ID,
        "grantedBy": GRANTOR_DID,
        "grantedTo": GRANTEE_DID,
        "expiry": 1700000000,
        "scope": {"method": "CollectionsWrite"},
    },
    "PermissionsQuery": {"method": "PermissionsQuery"},
}


def minimal_descriptor(method: str) -> dict[str, Any]:
    """Smallest well-formed descriptor for ``method`` (a fresh copy)."""
    return copy.deepcopy(MINIMAL_DESCRIPTORS[method])


@dataclass(slots=True)
class ConformanceCaseResult:
    case_id: str
    category: str
    ok: bool
    detail: str
    duration_ms: int


def run_conformance_suite(
    *,
    categories: Iterable[str] | None = None,
    concurrency_workers: int = 8,
) -> dict[str, Any]:
    selected = _normalize_categories(categories)

    started_at = now_iso_utc()
    started_perf = time.perf_counter()
    results: list[ConformanceCaseResult] = []

    def record(*, case_id: str, category: str, fn: Callable[[], str | None]) -> None:
        case_started = time.perf_counter()
        try:
            detail = fn() or "ok"
            ok = True
        except Exception as exc:
            detail = f"{type(exc).__name__}: {exc}"
            ok = False
        elapsed_ms = int((time.perf_counter() - case_started) * 1000)
        if not ok:
            logger.warning("conformance case %s failed: %s", case_id, detail)
        results.append(
            ConformanceCaseResult(
                case_id=case_id,
                category=category,
                ok=ok,
                detail=detail,
                duration_ms=elapsed_ms,
            )
        )

    if "golden" in selected:
        _run_golden_cases(record=record)
    if "negative" in selected:
        _run_negative_cases(record=record)
    if "concurrency" in selected:
        _run_concurrency_cases(record=record, workers=concurrency_workers)

    total_ms = int((time.perf_counter() - started_perf) * 1000)
    total = len(results)
    passed_count = sum(1 for item in results if item.ok)
    failed = total - passed_count
    return {
        "protocol": CONFORMANCE_VERSION,
        "schemas": schema_fingerprint(),
        "started_at": started_at,
        "duration_ms": total_ms,
        "passed": failed == 0,
        "summary": {
            "total": total,
            "passed": passed_count,
            "failed": failed,
            "categories": sorted(selected),
        },
        "results": [asdict(item) for item in results],
    }


def _run_golden_cases(*, record: Callable[..., None]) -> None:
    for method in DEFAULT_REGISTRY.methods():

        def case(method: str = method) -> str:
            descriptor = minimal_descriptor(method)
            result = validate(method, descriptor)
            _assert(result.ok, f"expected {method} to validate, got {result.error}")
            _assert(result.value == descriptor, "normalized descriptor differs from input")
            return "minimal descriptor valid"

        record(case_id=f"golden.{method}.minimal", category="golden", fn=case)


def _run_negative_cases(*, record: Callable[..., None]) -> None:
    def missing_date_created() -> str:
        descriptor = minimal_descriptor("CollectionsWrite")
        del descriptor["dateCreated"]
        _expect(validate(None, descriptor).error, MISSING_FIELD, field="dateCreated")
        return "missing dateCreated rejected"

    def bad_record_id() -> str:
        descriptor = minimal_descriptor("CollectionsDelete")
        descriptor["recordId"] = "not-a-uuid"
        _expect(validate(None, descriptor).error, INVALID_FORMAT, field="recordId")
        return "malformed recordId rejected"

    def bad_date_sort() -> str:
        descriptor = minimal_descriptor("CollectionsQuery")
        descriptor["dateSort"] = "bogus"
        error = validate(None, descriptor).error
        _expect(error, NOT_IN_ENUM, field="dateSort")
        _assert(error is not None and error.value == "bogus", "expected offending value to be reported")
        return "unknown dateSort rejected"

    def scope_identifier_without_schema() -> str:
        descriptor = minimal_descriptor("PermissionsRequest")
        descriptor["scope"] = {"method": "CollectionsQuery", "identifier": RECORD_ID}
        _expect(validate(None, descriptor).error, CROSS_FIELD_VIOLATION, rule=RULE_SCOPE_IDENTIFIER)
        return "scope identifier without schema rejected"

    def publication_not_publishable() -> str:
        descriptor = minimal_descriptor("PermissionsGrant")
        descriptor["scope"] = {"method": "CollectionsDelete"}
        descriptor["conditions"] = {"publication": True}
        _expect(validate(None, descriptor).error, CROSS_FIELD_VIOLATION, rule=RULE_PUBLICATION)
        return "publication condition on non-publishable method rejected"

    def hint_mismatch() -> str:
        _expect(validate("ThreadsQuery", minimal_descriptor("CollectionsQuery")).error, METHOD_MISMATCH)
        return "method hint mismatch rejected"

    def unknown_method() -> str:
        _expect(validate(None, {"method": "PermissionsRevoke"}).error, UNKNOWN_METHOD)
        return "unknown method rejected"

    def unknown_member() -> str:
        descriptor = minimal_descriptor("ThreadsClose")
        descriptor["reason"] = "done"
        _expect(validate(None, descriptor).error, UNKNOWN_FIELD, field="reason")
        return "undeclared field rejected"

    cases: list[tuple[str, Callable[[], str]]] = [
        ("negative.CollectionsWrite.missing_date_created", missing_date_created),
        ("negative.CollectionsDelete.invalid_record_id", bad_record_id),
        ("negative.CollectionsQuery.date_sort_not_in_enum", bad_date_sort),
        ("negative.PermissionsRequest.scope_identifier_without_schema", scope_identifier_without_schema),
        ("negative.PermissionsGrant.publication_not_publishable", publication_not_publishable),
        ("negative.method_hint_mismatch", hint_mismatch),
        ("negative.unknown_method", unknown_method),
        ("negative.unknown_field", unknown_member),
    ]
    for case_id, fn in cases:
        record(case_id=case_id, category="negative", fn=fn)


def _run_concurrency_cases(*, record: Callable[..., None], workers: int) -> None:
    def identical_errors() -> str:
        descriptor = minimal_descriptor("CollectionsDelete")
        descriptor["recordId"] = "not-a-uuid"
        rounds = max(2, workers * 4)
        with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
            errors = list(executor.map(lambda _: validate(None, descriptor).error, range(rounds)))
        _assert(all(error == errors[0] for error in errors), "concurrent validations disagree")
        _assert(descriptor["recordId"] == "not-a-uuid", "validator mutated its input")
        return f"{rounds} concurrent validations agree"

    record(case_id="concurrency.identical_errors", category="concurrency", fn=identical_errors)


def _expect(error: ValidationError | None, kind: str, *, field: str | None = None, rule: str | None = None) -> None:
    _assert(error is not None, f"expected {kind}, descriptor was accepted")
    assert error is not None
    _assert(error.kind == kind, f"expected {kind}, got {error.kind}")
    if field is not None:
        _assert(error.field == field, f"expected field {field!r}, got {error.field!r}")
    if rule is not None:
        _assert(error.rule == rule, f"expected rule {rule!r}, got {error.rule!r}")


def _normalize_categories(categories: Iterable[str] | None) -> set[str]:
    if categories is None:
        return set(SUPPORTED_CATEGORIES)
    values = {item.strip().lower() for item in categories if isinstance(item, str) and item.strip()}
    if not values or "all" in values:
        return set(SUPPORTED_CATEGORIES)
    unknown = values - SUPPORTED_CATEGORIES
    if unknown:
        raise ValueError(f"unsupported conformance categories: {sorted(unknown)}")
    return values


def _assert(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def render_conformance_text(report: dict[str, Any]) -> str:
    lines: list[str] = []
    summary = report.get("summary", {})
    lines.append(f"Protocol: {report.get('protocol')}")
    lines.append(f"Schemas: {report.get('schemas')}")
    lines.append(
        "Summary: total={total} passed={passed} failed={failed} duration_ms={duration_ms}".format(
            total=summary.get("total"),
            passed=summary.get("passed"),
            failed=summary.get("failed"),
            duration_ms=report.get("duration_ms"),
        )
    )
    lines.append("Categories: {categories}".format(categories=",".join(summary.get("categories", []))))
    lines.append("Cases:")

    results = report.get("results", [])
    if isinstance(results, list):
        for item in results:
            if not isinstance(item, dict):
                continue
            marker = "PASS" if bool(item.get("ok")) else "FAIL"
            lines.append(
                "[{marker}] {case_id} ({category}) - {detail} [{duration}ms]".format(
                    marker=marker,
                    case_id=item.get("case_id"),
                    category=item.get("category"),
                    detail=item.get("detail"),
                    duration=item.get("duration_ms"),
                )
            )
    return "\n".join(lines)


def render_conformance_json(report: dict[str, Any]) -> str:
    return json.dumps(report, indent=2, sort_keys=True)
