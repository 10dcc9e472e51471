"""Protocol constants."""

COLLECTIONS_METHODS = (
    "CollectionsQuery",
    "CollectionsWrite",
    "CollectionsCommit",
    "CollectionsDelete",
)
THREADS_METHODS = (
    "ThreadsQuery",
    "ThreadsCreate",
    "ThreadsReply",
    "ThreadsClose",
    "ThreadsDelete",
)
PERMISSIONS_METHODS = (
    "PermissionsRequest",
    "PermissionsGrant",
    "PermissionsQuery",
)

SUPPORTED_METHODS = COLLECTIONS_METHODS + THREADS_METHODS + PERMISSIONS_METHODS

INTERFACES = {
    "Collections": COLLECTIONS_METHODS,
    "Threads": THREADS_METHODS,
    "Permissions": PERMISSIONS_METHODS,
}

DATE_SORT_VALUES = (
    "createdAscending",
    "createdDescending",
    "publishedAscending",
    "publishedDescending",
)
ATTESTATION_VALUES = ("prohibited", "optional", "required")
ENCRYPTION_VALUES = ("optional", "required")

CONDITION_DEFAULTS = {
    "attestation": "optional",
    "encryption": "optional",
    "delegation": False,
    "publication": False,
    "sharedAccess": False,
}

UNKNOWN_METHOD = "UnknownMethod"
METHOD_MISMATCH = "MethodMismatch"
MISSING_FIELD = "MissingField"
WRONG_TYPE = "WrongType"
INVALID_FORMAT = "InvalidFormat"
NOT_IN_ENUM = "NotInEnum"
CROSS_FIELD_VIOLATION = "CrossFieldViolation"
UNKNOWN_FIELD = "UnknownField"

ERROR_KINDS = {
    UNKNOWN_METHOD,
    METHOD_MISMATCH,
    MISSING_FIELD,
    WRONG_TYPE,
    INVALID_FORMAT,
    NOT_IN_ENUM,
    CROSS_FIELD_VIOLATION,
    UNKNOWN_FIELD,
}

RULE_METHOD_LITERAL = "method-literal"
RULE_SCOPE_IDENTIFIER = "scope-identifier-requires-schema"
RULE_PUBLICATION = "publication-requires-publishable-method"
