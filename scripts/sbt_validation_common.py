#!/usr/bin/env python3
"""
Skill Builder Toolkit - Common Module

Shared infrastructure for the skill validator, the subagent generator and the
repository creator. This module contains:
- Type definitions (Severity, ValidationFinding, ValidationReport, Frontmatter)
- Common constants (exit codes, skip directories, file extensions)
- Front-matter parsing (YAML with a line-scan fallback)
- Terminal formatting helpers (ANSI colours, report printing)

All scripts import from this module so findings and output stay consistent.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

# =============================================================================
# Type Definitions
# =============================================================================

# Finding severity levels
# - ERROR: blocks the run (non-zero exit code)
# - WARNING: advisory, always reported, never blocks
Severity = Literal["ERROR", "WARNING"]

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK = 0  # No ERROR findings (warnings allowed)
EXIT_ERROR = 1  # At least one ERROR finding, or the run could not start

# =============================================================================
# Common Constants
# =============================================================================

# Directories never descended into while scanning a skill
SKIP_DIRS = {
    ".git",
    ".ruff_cache",
    ".mypy_cache",
    ".pytest_cache",
    "__pycache__",
    ".venv",
    "venv",
    "node_modules",
    ".tox",
    "dist",
    "build",
}

# Markdown documents scanned for content issues
MARKDOWN_EXTENSIONS = {".md", ".mdx", ".markdown"}

# Script-like sources: scanned for content issues, hardcoded secrets and env vars
SCRIPT_EXTENSIONS = {".ts", ".js", ".mjs", ".cjs", ".py", ".sh", ".bash"}

# Skill entry document
SKILL_MD = "SKILL.md"

# Recommended opening for skill descriptions
DESCRIPTION_PREFIX = "This skill should be used when"

# Word count above which SKILL.md is considered oversized
MAX_BODY_WORDS = 3000

# Valid model values for generated subagents
VALID_MODELS = {"haiku", "sonnet", "opus", "inherit"}

# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ValidationFinding:
    """Single validation finding.

    Attributes:
        severity: ERROR or WARNING
        message: Human-readable description of the finding
        file: Optional path (relative to the scanned root) the finding is about
        line: Optional 1-based line number in that file
    """

    severity: Severity
    message: str
    file: str | None = None
    line: int | None = None

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, str | int | None] = {"severity": self.severity, "message": self.message}
        if self.file is not None:
            result["file"] = self.file
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class ValidationReport:
    """Ordered collection of findings for one run.

    Findings are appended in discovery order and never removed. The report
    decides the process exit code: any ERROR fails the run, WARNINGs never do.
    """

    findings: list[ValidationFinding] = field(default_factory=list)

    def add(self, severity: Severity, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add a finding."""
        self.findings.append(ValidationFinding(severity, message, file, line))

    def error(self, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add a blocking finding."""
        self.add("ERROR", message, file, line)

    def warning(self, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add an advisory finding, never blocks the run."""
        self.add("WARNING", message, file, line)

    def extend(self, findings: list[ValidationFinding]) -> None:
        """Append findings produced elsewhere, keeping their order."""
        self.findings.extend(findings)

    @property
    def errors(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == "ERROR"]

    @property
    def warnings(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == "WARNING"]

    @property
    def has_errors(self) -> bool:
        return any(f.severity == "ERROR" for f in self.findings)

    @property
    def exit_code(self) -> int:
        """EXIT_ERROR when any ERROR exists, otherwise EXIT_OK."""
        return EXIT_ERROR if self.has_errors else EXIT_OK

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "passed": not self.has_errors,
            "exit_code": self.exit_code,
            "counts": {"errors": len(self.errors), "warnings": len(self.warnings)},
            "findings": [f.to_dict() for f in self.findings],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# =============================================================================
# Front-matter Parsing
# =============================================================================

# Opening/closing --- lines (the block may be empty), body starts after the closing line
_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)??---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# Top-level "key: value" line inside a front-matter block
_FRONTMATTER_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*:\s*(.*)$")


@dataclass(frozen=True)
class Frontmatter:
    """Parsed front-matter block.

    Attributes:
        fields: Top-level keys mapped to their values
        body: Document content after the closing ---
        is_yaml: False when the block was not valid YAML and fields come from a line scan
    """

    fields: dict[str, Any]
    body: str
    is_yaml: bool = True


def scan_frontmatter_keys(block: str) -> dict[str, str]:
    """Line-based key scan for blocks that YAML cannot parse.

    Only top-level ``key: value`` lines are kept; values are stripped of
    surrounding quotes. Indented continuation lines are ignored.
    """
    result: dict[str, str] = {}
    for line in block.splitlines():
        if line[:1].isspace():
            continue
        match = _FRONTMATTER_KEY_RE.match(line)
        if match:
            result[match.group(1)] = match.group(2).strip().strip('"').strip("'")
    return result


def parse_frontmatter(content: str) -> Frontmatter | None:
    """Parse the front-matter block at the top of a document.

    Returns:
        Frontmatter, or None when the document has no ``---`` delimited block.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None

    block = match.group(1) or ""
    body = content[match.end() :]

    try:
        loaded = yaml.safe_load(block)
    except yaml.YAMLError:
        return Frontmatter(scan_frontmatter_keys(block), body, is_yaml=False)

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return Frontmatter(scan_frontmatter_keys(block), body, is_yaml=False)
    return Frontmatter(loaded, body)


# =============================================================================
# Utility Functions
# =============================================================================


def line_number_at(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, offset) + 1


def relative_label(path: Path, root: Path) -> str:
    """Forward-slash path relative to root, used as the finding's file label."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


# =============================================================================
# Color Formatting (for terminal output)
# =============================================================================

# ANSI color codes
COLORS = {
    "ERROR": "\033[91m",  # Red
    "WARNING": "\033[93m",  # Yellow
    "INFO": "\033[96m",  # Cyan
    "PASSED": "\033[92m",  # Green
    "DIM": "\033[90m",  # Gray
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
}


def colorize(text: str, level: str) -> str:
    """Apply color to text based on level."""
    color = COLORS.get(level, "")
    return f"{color}{text}{COLORS['RESET']}"


def format_finding(finding: ValidationFinding) -> str:
    """Format a single finding as ``file:line: message``."""
    if finding.file:
        location = finding.file
        if finding.line:
            location += f":{finding.line}"
        return f"{location}: {finding.message}"
    return finding.message


def print_report(report: ValidationReport, title: str) -> None:
    """Print ERRORS, then WARNINGS, then the summary count and status."""
    print(f"\n{COLORS['BOLD']}=== Validating Skill: {title} ==={COLORS['RESET']}\n")

    errors = report.errors
    warnings = report.warnings

    if errors:
        print(colorize("❌ ERRORS:", "ERROR"))
        for finding in errors:
            print(f"  - {format_finding(finding)}")
        print()

    if warnings:
        print(colorize("⚠️  WARNINGS:", "WARNING"))
        for finding in warnings:
            print(f"  - {format_finding(finding)}")
        print()

    if report.has_errors:
        print(f"=== Result: {colorize('❌ FAILED', 'ERROR')} ===")
    else:
        print(f"=== Result: {colorize('✅ PASSED', 'PASSED')} ===")
    print(f"Errors: {len(errors)}, Warnings: {len(warnings)}")
