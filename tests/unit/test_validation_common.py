#!/usr/bin/env python3
"""Tests for sbt_validation_common.py - findings, reports and front-matter parsing."""

import json

from sbt_validation_common import (
    EXIT_ERROR,
    EXIT_OK,
    ValidationFinding,
    ValidationReport,
    format_finding,
    line_number_at,
    parse_frontmatter,
    print_report,
    relative_label,
    scan_frontmatter_keys,
)

SKILL_WITH_FRONTMATTER = """---
name: demo-skill
description: This skill should be used when the user asks to "run the demo".
---
# Demo
"""


class TestParseFrontmatter:
    """Front-matter detection and the line-scan fallback."""

    def test_valid_yaml_block(self) -> None:
        """Fields come from YAML and the body starts after the closing ---."""
        fm = parse_frontmatter(SKILL_WITH_FRONTMATTER)
        assert fm is not None
        assert fm.is_yaml
        assert fm.fields["name"] == "demo-skill"
        assert fm.fields["description"].startswith("This skill should be used when")
        assert fm.body == "# Demo\n"

    def test_no_block_returns_none(self) -> None:
        assert parse_frontmatter("# Just a heading\n\nname: nope\n") is None

    def test_block_must_start_document(self) -> None:
        assert parse_frontmatter("\n---\nname: x\n---\n") is None

    def test_invalid_yaml_falls_back_to_line_scan(self) -> None:
        """Broken YAML still yields top-level keys, flagged as non-YAML."""
        fm = parse_frontmatter("---\nname: demo\ndescription: a: b: [\n---\nbody\n")
        assert fm is not None
        assert not fm.is_yaml
        assert fm.fields["name"] == "demo"
        assert fm.body == "body\n"

    def test_non_mapping_yaml_is_not_yaml_fields(self) -> None:
        fm = parse_frontmatter("---\njust a string\n---\n")
        assert fm is not None
        assert not fm.is_yaml
        assert fm.fields == {}

    def test_empty_block(self) -> None:
        """An empty block is still front-matter, just without fields."""
        fm = parse_frontmatter("---\n---\nBody\n")
        assert fm is not None
        assert fm.is_yaml
        assert fm.fields == {}
        assert fm.body == "Body\n"

    def test_empty_block_does_not_swallow_later_rule(self) -> None:
        fm = parse_frontmatter("---\n---\nIntro\n\n---\n\nMore\n")
        assert fm is not None
        assert fm.fields == {}
        assert fm.body == "Intro\n\n---\n\nMore\n"

    def test_crlf_line_endings(self) -> None:
        fm = parse_frontmatter("---\r\nname: demo\r\n---\r\nbody")
        assert fm is not None
        assert fm.fields["name"] == "demo"
        assert fm.body == "body"


class TestScanFrontmatterKeys:
    def test_strips_quotes_and_skips_indented_lines(self) -> None:
        keys = scan_frontmatter_keys("name: 'demo'\ndescription: \"text\"\n  nested: ignored\n")
        assert keys == {"name": "demo", "description": "text"}


class TestValidationReport:
    """Severity bookkeeping and exit codes."""

    def test_empty_report_passes(self) -> None:
        report = ValidationReport()
        assert not report.has_errors
        assert report.exit_code == EXIT_OK

    def test_warnings_never_fail(self) -> None:
        report = ValidationReport()
        report.warning("advisory", "SKILL.md", 3)
        assert report.exit_code == EXIT_OK
        assert len(report.warnings) == 1

    def test_any_error_fails(self) -> None:
        report = ValidationReport()
        report.warning("advisory")
        report.error("blocking", "scripts/run.sh", 1)
        assert report.has_errors
        assert report.exit_code == EXIT_ERROR

    def test_findings_keep_discovery_order(self) -> None:
        report = ValidationReport()
        report.error("first")
        report.warning("second")
        report.extend([ValidationFinding("ERROR", "third")])
        assert [f.message for f in report.findings] == ["first", "second", "third"]

    def test_to_json_shape(self) -> None:
        report = ValidationReport()
        report.error("blocking", "a.md", 2)
        report.warning("advisory")
        data = json.loads(report.to_json())
        assert data["passed"] is False
        assert data["exit_code"] == EXIT_ERROR
        assert data["counts"] == {"errors": 1, "warnings": 1}
        assert data["findings"][0] == {"severity": "ERROR", "message": "blocking", "file": "a.md", "line": 2}
        assert data["findings"][1] == {"severity": "WARNING", "message": "advisory"}


class TestHelpers:
    def test_line_number_at(self) -> None:
        content = "one\ntwo\nthree"
        assert line_number_at(content, 0) == 1
        assert line_number_at(content, content.index("two")) == 2
        assert line_number_at(content, content.index("three")) == 3

    def test_relative_label_uses_forward_slashes(self, tmp_path) -> None:
        path = tmp_path / "scripts" / "run.py"
        assert relative_label(path, tmp_path) == "scripts/run.py"

    def test_format_finding(self) -> None:
        assert format_finding(ValidationFinding("ERROR", "bad", "x.md", 4)) == "x.md:4: bad"
        assert format_finding(ValidationFinding("WARNING", "meh", "x.md")) == "x.md: meh"
        assert format_finding(ValidationFinding("WARNING", "bare")) == "bare"

    def test_print_report_sections(self, capsys) -> None:
        report = ValidationReport()
        report.error("blocking", "a.md", 1)
        report.warning("advisory")
        print_report(report, "demo")
        out = capsys.readouterr().out
        assert "=== Validating Skill: demo ===" in out
        assert out.index("ERRORS:") < out.index("WARNINGS:")
        assert "FAILED" in out
        assert "Errors: 1, Warnings: 1" in out
