from __future__ import annotations

from typing import Any

RECORD_ID = "3f2504e0-4f89-41d3-9a0c-0305e82c3301"
THREAD_ID = "b6464162-84af-4aab-aff5-f1f8438dfc1e"
PARENT_ID = "7c9e6679-7425-40de-944b-e07fc1f90ae7"
GRANT_ID = "16fd2706-8baf-433b-82eb-8c7fada847da"
REQUEST_ID = "a8098c1a-f86e-41f2-bd4a-3c5a0b1f2e9d"
SCHEMA_URI = "https://schema.org/MusicPlaylist"
THREAD_TYPE_URI = "https://schema.org/Conversation"
ALICE = "did:example:alice"
BOB = "did:example:bob"

ALL_METHODS = (
    "CollectionsQuery",
    "CollectionsWrite",
    "CollectionsCommit",
    "CollectionsDelete",
    "ThreadsQuery",
    "ThreadsCreate",
    "ThreadsReply",
    "ThreadsClose",
    "ThreadsDelete",
    "PermissionsRequest",
    "PermissionsGrant",
    "PermissionsQuery",
)


def make_descriptor(method: str) -> dict[str, Any]:
    """Minimal well-formed descriptor: required fields only."""
    if method in {"CollectionsQuery", "ThreadsQuery", "PermissionsQuery"}:
        return {"method": method}
    if method in {"CollectionsWrite", "CollectionsCommit"}:
        return {"method": method, "recordId": RECORD_ID, "dateCreated": 1660000000}
    if method == "CollectionsDelete":
        return {"method": method, "recordId": RECORD_ID}
    if method == "ThreadsCreate":
        return {"method": method, "threadId": THREAD_ID, "threadType": THREAD_TYPE_URI, "schema": SCHEMA_URI}
    if method == "ThreadsReply":
        return {"method": method, "threadId": THREAD_ID, "parentId": PARENT_ID, "schema": SCHEMA_URI}
    if method in {"ThreadsClose", "ThreadsDelete"}:
        return {"method": method, "threadId": THREAD_ID}
    if method == "PermissionsRequest":
        return {
            "method": method,
            "grantedBy": ALICE,
            "grantedTo": BOB,
            "scope": {"method": "CollectionsWrite"},
        }
    if method == "PermissionsGrant":
        return {
            "method": method,
            "permissionGrantId": GRANT_ID,
            "grantedBy": ALICE,
            "grantedTo": BOB,
            "expiry": 1700000000,
            "scope": {"method": "CollectionsWrite"},
        }
    raise KeyError(method)


def make_full_write() -> dict[str, Any]:
    return {
        "method": "CollectionsWrite",
        "nonce": "9b9c7f1fcabfc471ee2682890b58a427",
        "recordId": RECORD_ID,
        "schema": SCHEMA_URI,
        "published": True,
        "dateCreated": 1660000000,
        "datePublished": 1660000500,
    }


def make_message(descriptor: dict[str, Any]) -> dict[str, Any]:
    return {
        "data": "eyJoZWxsbyI6IndvcmxkIn0",
        "descriptor": descriptor,
    }
