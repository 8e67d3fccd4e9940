#!/usr/bin/env python3
"""
Skill Builder Toolkit - Subagent Generator

Generates a companion specialist subagent for a skill. Delegating skill work
to a specialist keeps the skill's instructions out of the main conversation.

Reads SKILL.md front-matter, extracts the trigger phrases quoted after "when"
in the description, infers a minimal tool set from the document body, renders
the subagent template and writes <name>-specialist.md.

Usage:
    uv run scripts/sbt_generate_subagent.py path/to/skill \
      [--output ~/.claude/agents] \
      [--tools Read,Grep] \
      [--model sonnet] \
      [--template my-template.md] \
      [--skip-output-snippet] \
      [--dry-run]
"""

from __future__ import annotations

import argparse
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from sbt_validation_common import EXIT_ERROR, EXIT_OK, SKILL_MD, VALID_MODELS, colorize, parse_frontmatter

DEFAULT_MODEL = "sonnet"

# First "when" in the description; quoted phrases after it are triggers
WHEN_RE = re.compile(r"\bwhen\b", re.IGNORECASE)
QUOTED_RE = re.compile(r"\"([^\"]+)\"|“([^”]+)”")

PLACEHOLDER_RE = re.compile(r"\{\{\s*(name|description|triggers|tools|model)\s*\}\}")

# Keyword groups -> tools they imply, checked in this order
TOOL_KEYWORDS: list[tuple[tuple[str, ...], tuple[str, ...]]] = [
    (("write", "create file", "edit", "modify"), ("Write", "Edit")),
    (("bash", "npm", "command", "terminal", "shell", "run "), ("Bash",)),
    (("search", "find", "grep", "glob"), ("Grep", "Glob")),
    (("web", "fetch", "url", "http"), ("WebFetch",)),
]

DEFAULT_SUBAGENT_TEMPLATE = """\
---
name: {{name}}-specialist
description: Specialist for the {{name}} skill. Delegate {{triggers}} here.
tools: {{tools}}
model: {{model}}
---

# {{name}} Specialist

You are a specialist subagent for the **{{name}}** skill. You run in your own
context so the skill's instructions never load into the main conversation.

## Skill Summary

{{description}}

## When You Are Invoked

Handle delegated tasks matching: {{triggers}}

## Operating Rules

1. Load the {{name}} skill and follow its instructions exactly.
2. Use only these tools: {{tools}}.
3. Never print secrets or environment variable values.
4. Finish with a short summary: what you did, files touched, open follow-ups.
"""


class SubagentGenerationError(Exception):
    """Raised when a subagent cannot be generated from a skill."""


@dataclass(frozen=True)
class SkillMetadata:
    """Metadata parsed once from a SKILL.md front-matter block."""

    name: str
    description: str
    triggers: tuple[str, ...] = ()
    version: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    subagent_path: Path
    content: str
    snippet: str
    metadata: SkillMetadata
    tools: list[str]
    written: bool


def extract_triggers(description: str) -> tuple[str, ...]:
    """Quoted phrases following the first "when" in the description, in order."""
    match = WHEN_RE.search(description)
    if not match:
        return ()
    return tuple(a or b for a, b in QUOTED_RE.findall(description[match.end() :]))


def parse_skill_metadata(content: str) -> SkillMetadata:
    """Parse name, description and triggers from SKILL.md content.

    Raises:
        SubagentGenerationError: no front-matter block, no name, or a name that is not a plain file name
    """
    frontmatter = parse_frontmatter(content)
    if frontmatter is None:
        raise SubagentGenerationError("No YAML frontmatter found in SKILL.md")

    fields = frontmatter.fields
    name = fields.get("name")
    if name is None or not str(name).strip():
        raise SubagentGenerationError("No name found in SKILL.md frontmatter")
    name = str(name).strip()
    # The name becomes a file name in the output directory
    if "/" in name or "\\" in name or ".." in name:
        raise SubagentGenerationError(f"Invalid skill name '{name}': must not contain path separators or '..'")

    description = fields.get("description") or ""
    if not isinstance(description, str):
        description = str(description)
    description = " ".join(description.split())

    version = fields.get("version")
    return SkillMetadata(
        name=name,
        description=description,
        triggers=extract_triggers(description),
        version=str(version) if version is not None else None,
    )


def analyze_tool_requirements(content: str) -> list[str]:
    """Minimal tool set for the skill based on keywords in its content."""
    content_lower = content.lower()
    tools = ["Read"]
    for keywords, implied in TOOL_KEYWORDS:
        if any(keyword in content_lower for keyword in keywords):
            tools.extend(t for t in implied if t not in tools)
    return tools


def parse_tools_override(value: str) -> list[str]:
    """Split a comma-separated --tools value, dropping empties and duplicates."""
    tools: list[str] = []
    for item in value.split(","):
        item = item.strip()
        if item and item not in tools:
            tools.append(item)
    return tools


def format_triggers(metadata: SkillMetadata) -> str:
    if metadata.triggers:
        return ", ".join(f'"{t}"' for t in metadata.triggers)
    return "delegated tasks for this skill"


def render_subagent(template: str, metadata: SkillMetadata, tools: list[str], model: str = DEFAULT_MODEL) -> str:
    """Substitute {{name}}, {{description}}, {{triggers}}, {{tools}}, {{model}} in one pass."""
    values = {
        "name": metadata.name,
        "description": metadata.description,
        "triggers": format_triggers(metadata),
        "tools": ", ".join(tools),
        "model": model,
    }
    return PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def build_delegation_snippet(metadata: SkillMetadata) -> str:
    """Instruction-file snippet telling the main agent when to delegate."""
    triggers = '", "'.join(metadata.triggers) if metadata.triggers else "skill-specific tasks"
    return f"""### {metadata.name} Subagent Delegation

When tasks match {metadata.name} triggers, delegate to the `{metadata.name}-specialist` subagent
for context isolation and token savings.

**Triggers:** "{triggers}"

**Delegation Pattern:**
```
Task({{
  description: "[task description]",
  prompt: "[detailed instructions]",
  subagent_type: "{metadata.name}-specialist"
}})
```
"""


def resolve_skill_md(skill_path: Path) -> Path:
    """Accept a skill directory or a SKILL.md path."""
    resolved = skill_path.expanduser().resolve()
    candidate = resolved / SKILL_MD if resolved.is_dir() else resolved
    if not candidate.is_file():
        raise SubagentGenerationError(f"SKILL.md not found at {candidate}")
    return candidate


def user_template_path() -> Path:
    return Path.home() / ".claude" / "skills" / "skill-builder" / "templates" / "subagent-template.md"


def load_template(template_arg: Path | None) -> str:
    """Explicit --template, else the user's installed template, else the built-in one."""
    if template_arg is not None:
        path = template_arg.expanduser()
        if not path.is_file():
            raise SubagentGenerationError(f"Subagent template not found at {path}")
    else:
        path = user_template_path()
        if not path.is_file():
            return DEFAULT_SUBAGENT_TEMPLATE

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SubagentGenerationError(f"Cannot read subagent template {path}: {e}") from e


def default_output_dir() -> Path:
    """$SBT_AGENTS_DIR, else ~/.claude/agents."""
    env_dir = os.environ.get("SBT_AGENTS_DIR", "").strip()
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".claude" / "agents"


def generate_subagent(
    skill_path: Path,
    output: Path | None = None,
    tools: str | None = None,
    model: str = DEFAULT_MODEL,
    template: Path | None = None,
    dry_run: bool = False,
) -> GenerationResult:
    """Generate the specialist subagent for a skill.

    Nothing is written when ``dry_run`` is set.

    Raises:
        SubagentGenerationError: on any input, template or write failure
    """
    if model not in VALID_MODELS:
        raise SubagentGenerationError(f"Invalid model '{model}'. Valid models: {', '.join(sorted(VALID_MODELS))}")

    skill_md = resolve_skill_md(skill_path)
    try:
        content = skill_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SubagentGenerationError(f"Cannot read {skill_md}: {e}") from e

    metadata = parse_skill_metadata(content)
    tool_list = parse_tools_override(tools) if tools else analyze_tool_requirements(content)
    if not tool_list:
        raise SubagentGenerationError("--tools must name at least one tool")

    subagent_content = render_subagent(load_template(template), metadata, tool_list, model)
    output_dir = output.expanduser().resolve() if output is not None else default_output_dir()
    subagent_path = output_dir / f"{metadata.name}-specialist.md"
    snippet = build_delegation_snippet(metadata)

    if not dry_run:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            subagent_path.write_text(subagent_content, encoding="utf-8")
        except OSError as e:
            raise SubagentGenerationError(f"Cannot write {subagent_path}: {e}") from e

    return GenerationResult(
        subagent_path=subagent_path,
        content=subagent_content,
        snippet=snippet,
        metadata=metadata,
        tools=tool_list,
        written=not dry_run,
    )


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("skill_path", type=Path, help="Skill directory or SKILL.md path")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output directory (default: $SBT_AGENTS_DIR or ~/.claude/agents)",
    )
    parser.add_argument("--tools", type=str, default=None, help="Override tools (comma-separated)")
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_MODEL,
        help=f"Model for the subagent (default: {DEFAULT_MODEL})",
    )
    parser.add_argument("--template", type=Path, default=None, help="Subagent template file")
    parser.add_argument(
        "--skip-output-snippet",
        action="store_true",
        help="Do not print the delegation snippet after writing",
    )
    parser.add_argument("--dry-run", action="store_true", help="Preview without creating files")


def run(args: argparse.Namespace) -> int:
    try:
        result = generate_subagent(
            args.skill_path,
            output=args.output,
            tools=args.tools,
            model=args.model,
            template=args.template,
            dry_run=args.dry_run,
        )
    except SubagentGenerationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.dry_run:
        print("🔍 Dry run - no files created\n")
        print(f"Would create: {result.subagent_path}")
        print("\nSubagent content:\n")
        print(result.content)
        print("\nDelegation snippet:\n")
        print(result.snippet)
        return EXIT_OK

    print(colorize(f"✅ Generated subagent: {result.subagent_path}", "PASSED"))
    if not args.skip_output_snippet:
        print("\n📋 Add to your CLAUDE.md:\n")
        print(result.snippet)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="generate-subagent",
        description="Generate a companion specialist subagent for a skill.",
    )
    add_arguments(parser)
    return run(parser.parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
