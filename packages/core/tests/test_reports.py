"""Tests for the lint, coverage and test-result checks."""

import json

from prgate_core.annotations import Kind, Status
from prgate_core.reports import (
    check_coverage,
    check_lint,
    check_test_results,
    format_coverage,
    relative_path,
)


def _config(root):
    return {
        "project_root": str(root),
        "lint_report": "lint-results.json",
        "test_report": "test-results.json",
        "coverage_summary": "coverage/coverage-summary.json",
    }


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)


# ---------------------------------------------------------------------------
# relative_path
# ---------------------------------------------------------------------------


class TestRelativePath:
    def test_absolute_path_under_root(self, tmp_path):
        assert relative_path(str(tmp_path / "src" / "Button.js"), tmp_path) == "src/Button.js"

    def test_relative_path_unchanged(self, tmp_path):
        assert relative_path("src/Button.js", tmp_path) == "src/Button.js"

    def test_absolute_path_outside_root_unchanged(self, tmp_path):
        outside = "/somewhere/else/file.js"
        assert relative_path(outside, tmp_path / "project") == outside


# ---------------------------------------------------------------------------
# check_lint
# ---------------------------------------------------------------------------


class TestCheckLint:
    def test_severity_mapping(self, tmp_path):
        _write(
            tmp_path / "lint-results.json",
            [
                {
                    "filePath": str(tmp_path / "src" / "a.js"),
                    "messages": [
                        {"message": "Unexpected var", "ruleId": "no-var", "severity": 2, "line": 3},
                        {"message": "Missing semicolon", "ruleId": "semi", "severity": 1, "line": 7},
                        {"message": "Odd", "ruleId": "weird", "severity": 0, "line": 9},
                    ],
                }
            ],
        )
        result = check_lint(_config(tmp_path))

        assert len(result.annotations) == 2
        fail, warn = result.annotations
        assert fail.kind is Kind.FAIL
        assert fail.body == "Unexpected var `no-var`"
        assert (fail.path, fail.line) == ("src/a.js", 3)
        assert warn.kind is Kind.WARN
        assert (warn.path, warn.line) == ("src/a.js", 7)
        assert result.status is Status.BLOCKING

    def test_one_annotation_per_finding_across_files(self, tmp_path):
        _write(
            tmp_path / "lint-results.json",
            [
                {"filePath": str(tmp_path / "a.js"), "messages": [{"message": "x", "ruleId": "r", "severity": 2, "line": 1}]},
                {"filePath": str(tmp_path / "b.js"), "messages": [{"message": "y", "ruleId": "r", "severity": 2, "line": 2}]},
                {"filePath": str(tmp_path / "c.js"), "messages": []},
            ],
        )
        result = check_lint(_config(tmp_path))
        assert [(a.path, a.line) for a in result.annotations] == [("a.js", 1), ("b.js", 2)]

    def test_clean_report_is_ok(self, tmp_path):
        _write(tmp_path / "lint-results.json", [{"filePath": str(tmp_path / "a.js"), "messages": []}])
        result = check_lint(_config(tmp_path))
        assert result.annotations == []
        assert result.status is Status.OK

    def test_missing_report_is_single_blocking_annotation(self, tmp_path):
        result = check_lint(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].kind is Kind.FAIL
        assert result.annotations[0].body.startswith("Could not read lint results:")

    def test_corrupt_report_is_single_blocking_annotation(self, tmp_path):
        _write(tmp_path / "lint-results.json", "{not json")
        result = check_lint(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.status is Status.BLOCKING

    def test_wrong_shape_is_blocking(self, tmp_path):
        _write(tmp_path / "lint-results.json", {"filePath": "a.js"})
        result = check_lint(_config(tmp_path))
        assert len(result.annotations) == 1
        assert "expected a list" in result.annotations[0].body


# ---------------------------------------------------------------------------
# check_coverage
# ---------------------------------------------------------------------------


class TestCheckCoverage:
    def test_message_contains_formatted_totals(self, tmp_path):
        _write(
            tmp_path / "coverage" / "coverage-summary.json",
            {"total": {"lines": {"covered": 80, "total": 100, "pct": 80}}},
        )
        result = check_coverage(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].kind is Kind.MESSAGE
        assert "80 / 100 lines (80%)" in result.annotations[0].body

    def test_all_kinds_joined_in_file_order(self, tmp_path):
        _write(
            tmp_path / "coverage" / "coverage-summary.json",
            {
                "total": {
                    "statements": {"covered": 9, "total": 10, "pct": 90},
                    "branches": {"covered": 1, "total": 4, "pct": 25},
                }
            },
        )
        body = check_coverage(_config(tmp_path)).annotations[0].body
        assert body == "Code coverage: 9 / 10 statements (90%), 1 / 4 branches (25%)"

    def test_missing_file_is_advisory(self, tmp_path):
        result = check_coverage(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].kind is Kind.WARN
        assert result.annotations[0].body.startswith("Could not read coverage file:")
        assert result.status is Status.ADVISORY

    def test_missing_total_key_is_advisory(self, tmp_path):
        _write(tmp_path / "coverage" / "coverage-summary.json", {"src/a.js": {}})
        result = check_coverage(_config(tmp_path))
        assert result.status is Status.ADVISORY

    def test_float_percentages_formatted_like_json(self):
        assert format_coverage("lines", {"covered": 5, "total": 6, "pct": 83.33}) == "5 / 6 lines (83.33%)"
        assert format_coverage("lines", {"covered": 5, "total": 5, "pct": 100.0}) == "5 / 5 lines (100%)"


# ---------------------------------------------------------------------------
# check_test_results
# ---------------------------------------------------------------------------


class TestCheckTestResults:
    def test_success_message(self, tmp_path):
        _write(
            tmp_path / "test-results.json",
            {"success": True, "numPassedTests": 41, "numTotalTests": 42, "numPendingTests": 1, "testResults": []},
        )
        result = check_test_results(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].kind is Kind.MESSAGE
        assert "41/42 (1 skipped)" in result.annotations[0].body

    def test_failed_assertions_one_fail_per_file(self, tmp_path):
        _write(
            tmp_path / "test-results.json",
            {
                "success": False,
                "testResults": [
                    {
                        "name": str(tmp_path / "src" / "Button.test.js"),
                        "status": "failed",
                        "assertionResults": [
                            {"status": "passed", "fullName": "renders"},
                            {
                                "status": "failed",
                                "fullName": "Button handles click",
                                "failureMessages": ["\x1b[31mexpected 1 to be 2\x1b[39m"],
                                "location": {"line": 14, "column": 3},
                            },
                            {"status": "failed", "fullName": "Button is focusable", "failureMessages": []},
                        ],
                    },
                    {"name": str(tmp_path / "src" / "Ok.test.js"), "status": "passed", "assertionResults": []},
                ],
            },
        )
        result = check_test_results(_config(tmp_path))

        assert len(result.annotations) == 1
        annotation = result.annotations[0]
        assert annotation.kind is Kind.FAIL
        assert (annotation.path, annotation.line) == ("src/Button.test.js", 14)
        assert "Button handles click" in annotation.body
        assert "Button is focusable" in annotation.body
        assert "expected 1 to be 2" in annotation.body
        assert "\x1b" not in annotation.body

    def test_suite_that_failed_to_run(self, tmp_path):
        _write(
            tmp_path / "test-results.json",
            {
                "success": False,
                "testResults": [
                    {"name": "src/Broken.test.js", "status": "failed", "message": "SyntaxError", "assertionResults": []}
                ],
            },
        )
        result = check_test_results(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].path == "src/Broken.test.js"
        assert "SyntaxError" in result.annotations[0].body

    def test_unsuccessful_without_failures_still_blocks(self, tmp_path):
        _write(tmp_path / "test-results.json", {"success": False, "testResults": []})
        result = check_test_results(_config(tmp_path))
        assert result.status is Status.BLOCKING
        assert len(result.annotations) == 1

    def test_missing_report_is_blocking(self, tmp_path):
        result = check_test_results(_config(tmp_path))
        assert len(result.annotations) == 1
        assert result.annotations[0].body.startswith("Could not read test results:")
        assert result.status is Status.BLOCKING
