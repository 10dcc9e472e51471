from __future__ import annotations

import unittest

from dwn_descriptors.fields import (
    BOOLEAN,
    ENUM,
    STRING,
    TIMESTAMP,
    URI,
    UUID4,
    FieldSpec,
    check_value,
    enum_alias,
    is_uri,
    is_uuid4,
    optional,
)


class UUIDTests(unittest.TestCase):
    def test_accepts_version_four(self) -> None:
        self.assertTrue(is_uuid4("b6464162-84af-4aab-aff5-f1f8438dfc1e"))
        self.assertTrue(is_uuid4("B6464162-84AF-4AAB-AFF5-F1F8438DFC1E"))

    def test_rejects_other_versions_and_variants(self) -> None:
        self.assertFalse(is_uuid4("b6464162-84af-1aab-aff5-f1f8438dfc1e"))
        self.assertFalse(is_uuid4("b6464162-84af-4aab-7ff5-f1f8438dfc1e"))
        self.assertFalse(is_uuid4("b646416284af4aabaff5f1f8438dfc1e"))
        self.assertFalse(is_uuid4("{b6464162-84af-4aab-aff5-f1f8438dfc1e}"))
        self.assertFalse(is_uuid4("b6464162-84af-4aab-aff5-f1f8438dfc1e\n"))

    def test_non_string_is_wrong_type(self) -> None:
        error = check_value("recordId", 42, optional(UUID4))
        assert error is not None
        self.assertEqual(error.kind, "WrongType")


class URITests(unittest.TestCase):
    def test_accepts_generic_uris(self) -> None:
        for value in (
            "https://schema.org/SocialMediaPosting",
            "did:example:123456789abcdefghi",
            "urn:isbn:0451450523",
            "mailto:someone@example.com",
            "http://example.com/a%20b?q=1#frag",
            "http://[::1]:8080/",
            "about:",
        ):
            with self.subTest(value=value):
                self.assertTrue(is_uri(value))

    def test_rejects_malformed_uris(self) -> None:
        for value in (
            "",
            "schema.org/SocialMediaPosting",
            "1http://example.com",
            ":",
            "://example.com",
            "https://example.com/a b",
            "https://example.com/%zz",
            "http://[::1/",
            "https://example.com/<tag>",
        ):
            with self.subTest(value=value):
                self.assertFalse(is_uri(value))

    def test_non_string_is_wrong_type(self) -> None:
        error = check_value("schema", ["https://schema.org"], optional(URI))
        assert error is not None
        self.assertEqual(error.kind, "WrongType")


class ScalarCheckTests(unittest.TestCase):
    def test_timestamp_rules(self) -> None:
        spec = optional(TIMESTAMP)
        self.assertIsNone(check_value("dateCreated", 0, spec))
        self.assertIsNone(check_value("dateCreated", 4102444800, spec))
        self.assertEqual(check_value("dateCreated", True, spec).kind, "WrongType")
        self.assertEqual(check_value("dateCreated", 1.5, spec).kind, "WrongType")
        self.assertEqual(check_value("dateCreated", -5, spec).kind, "InvalidFormat")

    def test_boolean_rejects_truthy_values(self) -> None:
        spec = optional(BOOLEAN)
        self.assertIsNone(check_value("published", False, spec))
        self.assertEqual(check_value("published", 1, spec).kind, "WrongType")
        self.assertEqual(check_value("published", "true", spec).kind, "WrongType")

    def test_free_string(self) -> None:
        spec = optional(STRING)
        self.assertIsNone(check_value("description", "", spec))
        self.assertEqual(check_value("description", None, spec).kind, "WrongType")

    def test_enum_reports_value(self) -> None:
        spec = optional(ENUM, choices=("optional", "required"))
        error = check_value("encryption", "always", spec)
        assert error is not None
        self.assertEqual(error.kind, "NotInEnum")
        self.assertEqual(error.value, "always")
        self.assertEqual(check_value("encryption", 1, spec).kind, "WrongType")


class FieldSpecTests(unittest.TestCase):
    def test_unknown_kind_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FieldSpec("decimal")

    def test_enum_needs_choices(self) -> None:
        with self.assertRaises(ValueError):
            FieldSpec(ENUM)

    def test_enum_alias_form(self) -> None:
        self.assertEqual(enum_alias("createdAscending"), "CREATED_ASCENDING")
        self.assertEqual(enum_alias("CollectionsQuery"), "COLLECTIONS_QUERY")
        self.assertEqual(enum_alias("optional"), "OPTIONAL")


if __name__ == "__main__":
    unittest.main()
