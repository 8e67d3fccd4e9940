#!/usr/bin/env python3
"""
Skill Builder Toolkit - Scan Rules

Immutable rule set consumed by the content scanner. The defaults below cover
project-specific leakage, secret-exposure commands, hardcoded secret literals
and the markers that identify documented anti-pattern examples.

A run can swap or extend the defaults with a YAML rule file:

    extend: true                    # append to defaults instead of replacing
    project_specific:
      - "Globex"                    # plain regex string (case-insensitive)
      - pattern: "INTERNAL-[0-9]+"
        ignore_case: false
    secret_exposure:
      - pattern: 'vault\\s+read'
        message: "vault read prints secrets"
    context_window: 3
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from sbt_validation_common import MARKDOWN_EXTENSIONS, MAX_BODY_WORDS, SCRIPT_EXTENSIONS


class RuleConfigError(Exception):
    """Raised when a rule file cannot be loaded or holds an invalid rule."""


@dataclass(frozen=True)
class PatternRule:
    """A compiled pattern and the message reported when it matches."""

    pattern: re.Pattern[str]
    message: str = ""

    def search(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)

    def finditer(self, text: str):
        return self.pattern.finditer(text)


def rule(pattern: str, message: str = "", ignore_case: bool = True) -> PatternRule:
    """Compile a PatternRule."""
    return PatternRule(re.compile(pattern, re.IGNORECASE if ignore_case else 0), message)


# =============================================================================
# Default Rules
# =============================================================================

# Organisation names and identifiers that tie a skill to one project
DEFAULT_PROJECT_SPECIFIC = (
    rule(r"skillsmith"),
    rule(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"),
    rule(r"\b(?:Acme|MyCompany|OurTeam)\b"),
    rule(r"internal\.(?:company|corp|org)\."),
)

DEFAULT_ADVISORY = (
    rule(r"\bhardcoded\b", 'Contains "hardcoded" - may indicate config issues'),
    rule(r"\b(?:TODO|FIXME|HACK)\b", "Contains TODO/FIXME/HACK comments", ignore_case=False),
)

# Shell commands that print credentials to the terminal or a transcript
DEFAULT_SECRET_EXPOSURE = (
    rule(r"echo\s+[\"']?\$\{?[A-Z_]*KEY", "Echo command exposes secret KEY variable"),
    rule(r"echo\s+[\"']?\$\{?[A-Z_]*SECRET", "Echo command exposes SECRET variable"),
    rule(r"echo\s+[\"']?\$\{?[A-Z_]*TOKEN", "Echo command exposes TOKEN variable"),
    rule(r"cat\s+\.env\b", "cat .env exposes all secrets", ignore_case=False),
    rule(r"printenv\s*\|\s*grep", "printenv | grep may expose secrets"),
    rule(r"config\s+show", "config show commands often expose secrets"),
)

# String literals that open with a known credential prefix
DEFAULT_SECRET_LITERAL = (
    rule(r"['\"`](?:lin_api_|sk-|ghp_|npm_)", "Contains hardcoded API key", ignore_case=False),
)

# Lines that only look like credentials: placeholders, prefix checks, messages
DEFAULT_PLACEHOLDER = (
    rule(r"lin_api_xxx"),
    rule(r"lin_api_\.\.\."),
    rule(r"lin_api_your_key"),
    rule(r"lin_api_here"),
    rule(r"sk-xxx"),
    rule(r"ghp_xxx"),
    rule(r"npm_xxx"),
    rule(r"x{3,}"),
    rule(r"your[-_]?(?:api[-_]?)?key"),
    rule(r"<your-"),
    rule(r"\.(?:startsWith|startswith)\s*\(\s*['\"]"),
    rule(r"console\.(?:log|error|warn)\s*\("),
    rule(r"\bprint\s*\("),
    rule(r"\b(?:logger|logging|log)\.(?:debug|info|warning|warn|error|exception|critical)\s*\("),
    rule(r"throw\s+new\s+\w*Error"),
    rule(r"\braise\s+\w*(?:Error|Exception)\b"),
)

# Markers that flag a line or block as an example of what not to do
DEFAULT_DOCUMENTATION_MARKERS = (
    rule(r"❌|\bNEVER\b|\bunsafe\b|\bdon'?t\b|\bbad\b|\bwrong\b|\bavoid\b"),
    rule(r"#\s*Example:|<!--\s*Example|//\s*Example:"),
    rule(r"\bUsage:|\bExample:"),
)

# Section headings whose content is anti-pattern documentation
DEFAULT_ANTI_PATTERN_HEADINGS = (
    rule(r"anti[-\s]?patterns?"),
    rule(r"\bdon'?t\b|\bdo not\b"),
    rule(r"\bavoid\b|\bnever\b|\bbad\b|\bwrong\b|\bunsafe\b"),
    rule(r"pitfalls?|common mistakes"),
)

DEFAULT_PROJECT_FUNCTION_NAMES = (
    rule(r"\bfunction\s+\w*(?:Skillsmith|MyProject|Acme)\w*", ignore_case=False),
    rule(r"\bdef\s+\w*(?:skillsmith|my_project|acme)\w*"),
)


@dataclass(frozen=True)
class ScanRules:
    """Complete, immutable rule set for one scanner instance."""

    project_specific: tuple[PatternRule, ...] = DEFAULT_PROJECT_SPECIFIC
    advisory: tuple[PatternRule, ...] = DEFAULT_ADVISORY
    secret_exposure: tuple[PatternRule, ...] = DEFAULT_SECRET_EXPOSURE
    secret_literal: tuple[PatternRule, ...] = DEFAULT_SECRET_LITERAL
    placeholder: tuple[PatternRule, ...] = DEFAULT_PLACEHOLDER
    documentation_markers: tuple[PatternRule, ...] = DEFAULT_DOCUMENTATION_MARKERS
    anti_pattern_headings: tuple[PatternRule, ...] = DEFAULT_ANTI_PATTERN_HEADINGS
    project_function_names: tuple[PatternRule, ...] = DEFAULT_PROJECT_FUNCTION_NAMES
    markdown_extensions: frozenset[str] = field(default_factory=lambda: frozenset(MARKDOWN_EXTENSIONS))
    script_extensions: frozenset[str] = field(default_factory=lambda: frozenset(SCRIPT_EXTENSIONS))
    context_window: int = 5
    max_body_words: int = MAX_BODY_WORDS

    @property
    def scan_extensions(self) -> frozenset[str]:
        return self.markdown_extensions | self.script_extensions

    def is_placeholder(self, line: str) -> bool:
        """True when the line matches any placeholder shape."""
        return any(r.search(line) for r in self.placeholder)


DEFAULT_RULES = ScanRules()

_PATTERN_GROUPS = {
    "project_specific",
    "advisory",
    "secret_exposure",
    "secret_literal",
    "placeholder",
    "documentation_markers",
    "anti_pattern_headings",
    "project_function_names",
}
_EXTENSION_GROUPS = {"markdown_extensions", "script_extensions"}
_INT_SETTINGS = {"context_window", "max_body_words"}


def _compile_entry(group: str, entry: Any) -> PatternRule:
    if isinstance(entry, str):
        options: dict[str, Any] = {"pattern": entry}
    elif isinstance(entry, dict):
        options = entry
    else:
        raise RuleConfigError(f"{group}: rule must be a string or mapping, got {type(entry).__name__}")

    pattern = options.get("pattern")
    if not isinstance(pattern, str) or not pattern:
        raise RuleConfigError(f"{group}: rule is missing a 'pattern' string")
    message = options.get("message", "")
    if not isinstance(message, str):
        raise RuleConfigError(f"{group}: 'message' must be a string")
    ignore_case = options.get("ignore_case", True)
    if not isinstance(ignore_case, bool):
        raise RuleConfigError(f"{group}: 'ignore_case' must be true or false")

    try:
        return rule(pattern, message, ignore_case)
    except re.error as e:
        raise RuleConfigError(f"{group}: invalid regex {pattern!r}: {e}") from e


def _normalize_extension(group: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise RuleConfigError(f"{group}: extensions must be non-empty strings")
    ext = value.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


def rules_from_mapping(data: dict[str, Any], base: ScanRules = DEFAULT_RULES) -> ScanRules:
    """Build a ScanRules from a parsed rule-file mapping.

    List groups replace the matching group of ``base`` unless ``extend`` is
    true, in which case they are appended to it.
    """
    if not isinstance(data, dict):
        raise RuleConfigError("Rule file must contain a mapping at the top level")

    extend = data.get("extend", False)
    if not isinstance(extend, bool):
        raise RuleConfigError("'extend' must be true or false")

    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key == "extend":
            continue
        if key in _PATTERN_GROUPS:
            if not isinstance(value, list):
                raise RuleConfigError(f"{key}: expected a list of rules")
            compiled = tuple(_compile_entry(key, entry) for entry in value)
            changes[key] = getattr(base, key) + compiled if extend else compiled
        elif key in _EXTENSION_GROUPS:
            if not isinstance(value, list):
                raise RuleConfigError(f"{key}: expected a list of extensions")
            exts = frozenset(_normalize_extension(key, v) for v in value)
            changes[key] = getattr(base, key) | exts if extend else exts
        elif key in _INT_SETTINGS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise RuleConfigError(f"{key}: expected a non-negative integer")
            changes[key] = value
        else:
            raise RuleConfigError(f"Unknown rule group: {key}")

    return replace(base, **changes)


def load_scan_rules(path: Path, base: ScanRules = DEFAULT_RULES) -> ScanRules:
    """Load a YAML rule file on top of ``base``."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuleConfigError(f"Cannot read rule file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Rule file {path} is not valid YAML: {e}") from e

    if data is None:
        return base
    return rules_from_mapping(data, base)
