#!/usr/bin/env python3
"""
Skill Builder Toolkit - Skill Validator

Validates a skill directory before it is committed or published:

1. Structure: SKILL.md exists, front-matter has name/description, the
   description opens with the trigger sentence, referenced files exist and
   the body is not oversized
2. Generalization: no organisation names, UUIDs or internal hosts left over
   from the project the skill was extracted from
3. Secret exposure: no commands that print credentials (echo $API_KEY,
   cat .env, printenv | grep) outside documented anti-pattern examples
4. Hardcoded secrets: no credential literals in scripts unless the line is a
   placeholder, a prefix check or an error/help message
5. Environment documentation: every variable a script reads is documented in
   SKILL.md, and sensitive ones are handled through Varlock

Usage:
    uv run python scripts/validate_skill.py path/to/skill/
    uv run python scripts/validate_skill.py path/to/skill/ --rules my-rules.yaml
    uv run python scripts/validate_skill.py path/to/skill/ --json

Exit codes:
    0 - No errors (warnings may be present)
    1 - At least one error, or the path does not exist
"""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from gitignore_filter import GitignoreFilter
from sbt_markdown_context import DocumentContext
from sbt_scan_rules import DEFAULT_RULES, RuleConfigError, ScanRules, load_scan_rules
from sbt_validation_common import (
    DESCRIPTION_PREFIX,
    EXIT_ERROR,
    SKILL_MD,
    SKIP_DIRS,
    ValidationFinding,
    ValidationReport,
    line_number_at,
    parse_frontmatter,
    print_report,
    relative_label,
)

# Backticked references to bundled files
REFERENCED_FILE_RE = re.compile(r"`((?:references|scripts|examples)/[^`\s]+)`")

# Environment variable reads in script-like sources
ENV_VAR_PATTERNS = [
    re.compile(r"process\.env\.([A-Z_][A-Z0-9_]*)"),
    re.compile(r"process\.env\[\s*['\"]([A-Z_][A-Z0-9_]*)['\"]\s*\]"),
    re.compile(r"os\.environ\[\s*['\"]([A-Z_][A-Z0-9_]*)['\"]\s*\]"),
    re.compile(r"os\.environ\.get\(\s*['\"]([A-Z_][A-Z0-9_]*)['\"]"),
    re.compile(r"os\.getenv\(\s*['\"]([A-Z_][A-Z0-9_]*)['\"]"),
    re.compile(r"Deno\.env\.get\(\s*['\"]([A-Z_][A-Z0-9_]*)['\"]"),
]

SENSITIVE_VAR_RE = re.compile(r"KEY|SECRET|TOKEN|PASSWORD|CREDENTIAL|AUTH", re.IGNORECASE)

ENV_SCHEMA = ".env.schema"


@dataclass
class SkillValidationReport(ValidationReport):
    """Skill validation report with scan metadata."""

    skill_path: str = ""
    files_scanned: int = 0

    def to_dict(self) -> dict[str, object]:
        result = super().to_dict()
        result["skill_path"] = self.skill_path
        result["files_scanned"] = self.files_scanned
        return result


# =============================================================================
# Content Scanner
# =============================================================================


class ContentScanner:
    """Scans text files for leakage, secret exposure and hardcoded secrets.

    The rule set is fixed at construction, so one scanner always applies the
    same rules and different runs can use different rule sets side by side.
    """

    def __init__(self, rules: ScanRules = DEFAULT_RULES) -> None:
        self.rules = rules

    def iter_files(self, root: Path) -> list[Path]:
        """Scannable files under root: extension filter, skip dirs, .gitignore."""
        gi = GitignoreFilter(root)
        return list(gi.walk_files(skip_dirs=SKIP_DIRS, extensions=self.rules.scan_extensions))

    def scan(self, root: Path) -> list[ValidationFinding]:
        """Scan every file under root and return findings in file order."""
        return self.scan_files(root, self.iter_files(root))

    def scan_files(self, root: Path, files: list[Path]) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []
        for path in files:
            findings.extend(self.scan_file(path, relative_label(path, root)))
        return findings

    def scan_file(self, path: Path, rel_path: str) -> list[ValidationFinding]:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return [ValidationFinding("WARNING", f"Cannot read file ({e})", rel_path)]

        suffix = path.suffix.lower()
        return self.scan_content(
            content,
            rel_path,
            markdown=suffix in self.rules.markdown_extensions,
            script=suffix in self.rules.script_extensions,
        )

    def scan_content(
        self,
        content: str,
        rel_path: str,
        markdown: bool = False,
        script: bool = False,
    ) -> list[ValidationFinding]:
        """Apply every rule group to one file's content, in a fixed order."""
        report = ValidationReport()
        context = DocumentContext(content, self.rules, markdown=markdown)
        lines = context.lines

        # Project-specific leakage
        for rule in self.rules.project_specific:
            for match in rule.finditer(content):
                line_num = line_number_at(content, match.start())
                if context.is_documentation(line_num - 1):
                    continue
                report.warning(
                    rule.message or f'Contains potentially project-specific content: "{match.group(0)}"',
                    rel_path,
                    line_num,
                )
                break

        # Advisory content
        for rule in self.rules.advisory:
            match = rule.search(content)
            if match:
                report.warning(
                    rule.message or f'Contains "{match.group(0)}"',
                    rel_path,
                    line_number_at(content, match.start()),
                )

        # Secret exposure commands
        for rule in self.rules.secret_exposure:
            for match in rule.finditer(content):
                line_num = line_number_at(content, match.start())
                if context.is_documentation(line_num - 1):
                    continue
                message = rule.message or f'Command exposes secrets: "{match.group(0)}"'
                report.error(f"{message} - load secrets through Varlock instead", rel_path, line_num)
                break

        if not script:
            return report.findings

        # Hardcoded secret literals, once per file
        literal_found = False
        for rule in self.rules.secret_literal:
            for match in rule.finditer(content):
                line_num = line_number_at(content, match.start())
                if self.rules.is_placeholder(lines[line_num - 1]):
                    continue
                report.error(rule.message or "Contains hardcoded API key", rel_path, line_num)
                literal_found = True
                break
            if literal_found:
                break

        # Project-specific function names
        for rule in self.rules.project_function_names:
            match = rule.search(content)
            if match:
                report.warning(
                    rule.message or f"Function name contains project-specific term: {match.group(0)}",
                    rel_path,
                    line_number_at(content, match.start()),
                )

        return report.findings


# =============================================================================
# Structure Checks
# =============================================================================


def validate_skill_structure(skill_dir: Path, root: Path, rules: ScanRules, report: ValidationReport) -> None:
    """Validate one SKILL.md: front-matter fields, references, body size."""
    skill_md = skill_dir / SKILL_MD
    rel = relative_label(skill_md, root)

    try:
        content = skill_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        report.error(f"Cannot read {SKILL_MD} ({e})", rel)
        return

    frontmatter = parse_frontmatter(content)
    if frontmatter is None:
        report.error("SKILL.md missing YAML frontmatter", rel, 1)
        body = content
    else:
        body = frontmatter.body
        fields = frontmatter.fields
        if not frontmatter.is_yaml:
            report.warning("Frontmatter is not valid YAML (fields were read line by line)", rel, 1)

        if not fields.get("name"):
            report.error('Frontmatter missing required "name" field', rel, 1)

        description = fields.get("description")
        if not description:
            report.error('Frontmatter missing required "description" field', rel, 1)
        elif DESCRIPTION_PREFIX not in str(description):
            report.warning(f'Description should start with "{DESCRIPTION_PREFIX}..."', rel, 1)

    seen: set[str] = set()
    for match in REFERENCED_FILE_RE.finditer(content):
        ref = match.group(1)
        if ref in seen:
            continue
        seen.add(ref)
        if not (skill_dir / ref).exists():
            report.warning(f"Referenced file does not exist: {ref}", rel, line_number_at(content, match.start()))

    word_count = len(body.split())
    if word_count > rules.max_body_words:
        report.warning(
            f"SKILL.md body is {word_count} words (recommended: <2000). Consider moving content to references/",
            rel,
        )


# =============================================================================
# Environment Documentation Checks
# =============================================================================


def collect_env_vars(files: list[Path]) -> dict[str, Path]:
    """Map each environment variable read by the files to the first file reading it."""
    found: dict[str, Path] = {}
    for path in files:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        for pattern in ENV_VAR_PATTERNS:
            for match in pattern.finditer(content):
                found.setdefault(match.group(1), path)
    return found


def check_environment_documentation(
    skill_dir: Path,
    root: Path,
    script_files: list[Path],
    report: ValidationReport,
) -> None:
    """Warn about undocumented variables and sensitive ones without Varlock."""
    skill_md = skill_dir / SKILL_MD
    rel = relative_label(skill_md, root)
    try:
        doc = skill_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return

    env_vars = collect_env_vars(script_files)
    sensitive = [name for name in env_vars if SENSITIVE_VAR_RE.search(name)]

    for name, source in env_vars.items():
        if name not in doc:
            report.warning(
                f"Environment variable {name} used in {relative_label(source, root)} but not documented in SKILL.md",
                rel,
            )

    if not sensitive:
        return

    schema = skill_dir / ENV_SCHEMA
    if not schema.is_file() and "varlock" not in doc.lower():
        report.warning(
            f"Skill uses sensitive variables ({', '.join(sensitive)}) but does not reference Varlock. "
            "Consider adding .env.schema and Varlock documentation.",
            rel,
        )
        return

    if schema.is_file():
        schema_text = schema.read_text(encoding="utf-8", errors="replace")
        if "@sensitive" not in schema_text:
            for name in sensitive:
                if name in schema_text:
                    report.warning(
                        f".env.schema defines {name} but may be missing @sensitive annotation",
                        relative_label(schema, root),
                    )


# =============================================================================
# Main Validation Function
# =============================================================================


def _within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False


def validate_skill(root: Path, rules: ScanRules = DEFAULT_RULES) -> SkillValidationReport:
    """Validate every skill under root.

    A skill is a directory holding SKILL.md. A root with no scannable files
    yields an empty, passing report.
    """
    report = SkillValidationReport(skill_path=str(root))

    if not root.is_dir():
        report.error(f"Skill path is not a directory: {root}")
        return report

    root = root.resolve()
    scanner = ContentScanner(rules)
    files = scanner.iter_files(root)
    report.files_scanned = len(files)
    skill_dirs = sorted({path.parent for path in files if path.name == SKILL_MD})

    if files and not skill_dirs:
        report.warning("No SKILL.md found (every skill needs one)", SKILL_MD)

    for skill_dir in skill_dirs:
        validate_skill_structure(skill_dir, root, rules, report)

    report.extend(scanner.scan_files(root, files))

    script_files = [path for path in files if path.suffix.lower() in rules.script_extensions]
    for skill_dir in skill_dirs:
        # Nested skills own their own scripts
        owned = [
            path
            for path in script_files
            if _within(path, skill_dir)
            and not any(
                other != skill_dir and _within(other, skill_dir) and _within(path, other) for other in skill_dirs
            )
        ]
        check_environment_documentation(skill_dir, root, owned, report)

    return report


# =============================================================================
# CLI
# =============================================================================


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("skill_path", type=Path, help="Path to the skill directory")
    parser.add_argument("--rules", type=Path, default=None, metavar="FILE", help="YAML rule file")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Also print scan statistics")


def run(args: argparse.Namespace) -> int:
    """Run validation for parsed arguments and return the exit code."""
    skill_path: Path = args.skill_path
    if not skill_path.exists():
        print(f"Error: {skill_path} does not exist", file=sys.stderr)
        return EXIT_ERROR

    rules = DEFAULT_RULES
    if args.rules is not None:
        try:
            rules = load_scan_rules(args.rules)
        except RuleConfigError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return EXIT_ERROR

    report = validate_skill(skill_path, rules)

    if args.json:
        print(report.to_json())
    else:
        print_report(report, skill_path.resolve().name)
        if args.verbose:
            print(f"Files scanned: {report.files_scanned}")

    return report.exit_code


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Validate a skill directory before publishing")
    add_arguments(parser)
    return run(parser.parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
