from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from dwn_descriptors.cli import main
from dwn_descriptors.codec import encode_document, has_cbor_support

from tests.test_helpers import RECORD_ID, make_descriptor, make_message


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def _write(self, name: str, value: object) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(value, handle)
        return path

    def _run(self, argv: list[str]) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_validate_message_success(self) -> None:
        descriptor = make_descriptor("CollectionsQuery")
        descriptor["dateSort"] = "CREATED_DESCENDING"
        path = self._write("query.json", make_message(descriptor))

        code, out, _ = self._run(["validate", "--in-file", path, "--method", "CollectionsQuery"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["descriptor"]["dateSort"], "createdDescending")

    def test_validate_reports_first_error(self) -> None:
        descriptor = make_descriptor("CollectionsDelete")
        descriptor["recordId"] = "nope"
        path = self._write("delete.json", make_message(descriptor))

        code, out, err = self._run(["validate", "--in-file", path])
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        error = json.loads(err)
        self.assertEqual(error["kind"], "InvalidFormat")
        self.assertEqual(error["field"], "recordId")

    def test_validate_method_mismatch(self) -> None:
        path = self._write("query.json", make_descriptor("ThreadsQuery"))
        code, _, err = self._run(
            ["validate", "--in-file", path, "--descriptor-only", "--method", "CollectionsQuery"]
        )
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(err)["kind"], "MethodMismatch")

    def test_validate_with_policy_file(self) -> None:
        descriptor = make_descriptor("CollectionsDelete")
        descriptor["tags"] = ["x"]
        path = self._write("delete.json", descriptor)

        code, _, err = self._run(["validate", "--in-file", path, "--descriptor-only"])
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(err)["kind"], "UnknownField")

        policy = self._write("policy.json", {"unknown_fields": "ignore"})
        code, out, _ = self._run(["validate", "--in-file", path, "--descriptor-only", "--policy-file", policy])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"method": "CollectionsDelete", "recordId": RECORD_ID})

    def test_validate_bad_inputs_exit_two(self) -> None:
        missing = os.path.join(self._tmp.name, "missing.json")
        code, _, err = self._run(["validate", "--in-file", missing])
        self.assertEqual(code, 2)
        self.assertIn("failed to read", err)

        path = self._write("list.json", [1, 2, 3])
        code, _, _ = self._run(["validate", "--in-file", path])
        self.assertEqual(code, 2)

        policy = self._write("policy.json", {"unknown_fields": "sometimes"})
        code, _, err = self._run(["validate", "--in-file", path, "--policy-file", policy])
        self.assertEqual(code, 2)
        self.assertIn("validation policy", err)

    def test_validate_writes_normalized_result_to_out_file(self) -> None:
        descriptor = make_descriptor("CollectionsQuery")
        descriptor["dateSort"] = "PUBLISHED_ASCENDING"
        path = self._write("query.json", make_message(descriptor))
        out_path = os.path.join(self._tmp.name, "normalized.json")

        code, out, _ = self._run(["validate", "--in-file", path, "--out-file", out_path])
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        with open(out_path, "rb") as handle:
            raw = handle.read()
        self.assertEqual(raw, encode_document(json.loads(raw)))
        self.assertEqual(json.loads(raw)["descriptor"]["dateSort"], "publishedAscending")

    def test_validate_writes_cbor_out_file(self) -> None:
        if not has_cbor_support():
            self.skipTest("cbor2 not installed")

        path = self._write("delete.json", make_descriptor("CollectionsDelete"))
        out_path = os.path.join(self._tmp.name, "delete.cbor")
        code, _, _ = self._run(["validate", "--in-file", path, "--descriptor-only", "--out-file", out_path])
        self.assertEqual(code, 0)

        code, out, _ = self._run(["validate", "--in-file", out_path, "--descriptor-only"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), make_descriptor("CollectionsDelete"))

    def test_validate_non_object_descriptor_exits_two(self) -> None:
        path = self._write("message.json", {"descriptor": "CollectionsQuery"})
        code, out, err = self._run(["validate", "--in-file", path])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("descriptor must be an object", err)

    def test_schema_command(self) -> None:
        code, out, _ = self._run(["schema", "--method", "ThreadsReply"])
        self.assertEqual(code, 0)
        document = json.loads(out)
        self.assertEqual(document["properties"]["method"]["const"], "ThreadsReply")

        code, out, _ = self._run(["schema"])
        self.assertEqual(code, 0)
        bundle = json.loads(out)
        self.assertTrue(bundle["fingerprint"].startswith("sha256:"))
        self.assertEqual(len(bundle["schemas"]), 12)

    def test_features_command(self) -> None:
        code, out, _ = self._run(["features", "--method", "ThreadsQuery", "--no-batching"])
        self.assertEqual(code, 0)
        document = json.loads(out)
        self.assertEqual(document["interfaces"]["actions"], {"ThreadsQuery": True})
        self.assertEqual(document["interfaces"]["messaging"], {"batching": False})

        code, _, err = self._run(["features", "--method", "FilesRead"])
        self.assertEqual(code, 2)
        self.assertIn("FilesRead", err)

    def test_conformance_command(self) -> None:
        code, out, _ = self._run(["conformance", "--category", "golden", "--format", "json"])
        self.assertEqual(code, 0)
        report = json.loads(out)
        self.assertTrue(report["passed"])
        self.assertEqual(report["summary"]["categories"], ["golden"])

        code, _, _ = self._run(["conformance", "--category", "http"])
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
