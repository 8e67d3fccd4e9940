#!/usr/bin/env python3
"""Tests for sbt_markdown_context.py - documented-example detection."""

import dataclasses

from sbt_markdown_context import DocumentContext, FencedBlock, find_fenced_blocks
from sbt_scan_rules import DEFAULT_RULES


def md_context(content: str) -> DocumentContext:
    return DocumentContext(content, DEFAULT_RULES, markdown=True)


class TestFindFencedBlocks:
    def test_simple_block(self) -> None:
        lines = ["text", "```bash", "echo hi", "```", "after"]
        assert find_fenced_blocks(lines) == [FencedBlock(1, 3)]

    def test_unclosed_block_runs_to_end(self) -> None:
        assert find_fenced_blocks(["```", "a", "b"]) == [FencedBlock(0, 2)]

    def test_other_fence_character_does_not_close(self) -> None:
        assert find_fenced_blocks(["~~~", "```", "~~~"]) == [FencedBlock(0, 2)]

    def test_shorter_fence_does_not_close(self) -> None:
        assert find_fenced_blocks(["````", "```", "````"]) == [FencedBlock(0, 2)]

    def test_multiple_blocks(self) -> None:
        lines = ["```", "a", "```", "", "```py", "b", "```"]
        assert find_fenced_blocks(lines) == [FencedBlock(0, 2), FencedBlock(4, 6)]


class TestMarkdownStructure:
    """Markdown files are judged by headings and fenced blocks."""

    def test_same_line_marker(self) -> None:
        ctx = md_context("`echo $API_KEY` # ❌ NEVER\n")
        assert ctx.is_documentation(0)

    def test_anti_pattern_section_until_sibling_heading(self) -> None:
        content = "# Guide\n\n## Anti-Patterns\n\necho $API_KEY\n\n## Setup\n\necho $API_KEY\n"
        ctx = md_context(content)
        assert ctx.is_documentation(4)
        assert not ctx.is_documentation(8)

    def test_subsection_inherits_anti_pattern_heading(self) -> None:
        content = "## Things to Avoid\n### Shell\ncat .env\n## Next\ncat .env\n"
        ctx = md_context(content)
        assert ctx.is_documentation(2)
        assert not ctx.is_documentation(4)

    def test_heading_inside_fence_is_ignored(self) -> None:
        content = "## Anti-Patterns\n```bash\n# Setup\necho $API_KEY\n```\n"
        ctx = md_context(content)
        assert ctx.is_documentation(3)

    def test_fence_introduced_by_marker(self) -> None:
        content = (
            "Never do this:\n"
            "\n"
            "```bash\n"
            "echo $API_KEY\n"
            "```\n"
            "\n"
            "Do this:\n"
            "\n"
            "```bash\n"
            "varlock run -- ./deploy.sh\n"
            "```\n"
        )
        ctx = md_context(content)
        assert ctx.is_documentation(3)
        assert not ctx.is_documentation(9)

    def test_fence_intro_stops_at_heading(self) -> None:
        """A marker in the previous section's heading does not introduce the next block."""
        content = "## Bad examples removed\n\n## Setup\n```bash\necho $API_KEY\n```\n"
        ctx = md_context(content)
        assert not ctx.is_documentation(4)

    def test_fence_intro_within_section(self) -> None:
        content = "## Setup\nNever do this:\n```bash\necho $API_KEY\n```\n"
        ctx = md_context(content)
        assert ctx.is_documentation(3)

    def test_fence_containing_marker(self) -> None:
        ctx = md_context("```bash\n# ❌ leaks the key\necho $API_KEY\n```\n")
        assert ctx.is_documentation(2)

    def test_no_window_for_markdown(self) -> None:
        """A nearby marker outside any structure does not cover plain prose."""
        ctx = md_context("Avoid leaking keys.\n\necho $API_KEY\n")
        assert not ctx.is_documentation(2)


class TestLineWindow:
    """Non-markdown files fall back to a symmetric line window."""

    def test_marker_within_window(self) -> None:
        lines = ["# NEVER print credentials"] + ["pass"] * 10
        ctx = DocumentContext("\n".join(lines), DEFAULT_RULES, markdown=False)
        assert ctx.is_documentation(5)
        assert not ctx.is_documentation(6)

    def test_marker_after_match_counts(self) -> None:
        lines = ["pass"] * 3 + ["# bad example"]
        ctx = DocumentContext("\n".join(lines), DEFAULT_RULES, markdown=False)
        assert ctx.is_documentation(0)

    def test_custom_window(self) -> None:
        rules = dataclasses.replace(DEFAULT_RULES, context_window=1)
        lines = ["# NEVER do this", "pass", "pass"]
        ctx = DocumentContext("\n".join(lines), rules, markdown=False)
        assert ctx.is_documentation(1)
        assert not ctx.is_documentation(2)

    def test_out_of_range_index(self) -> None:
        ctx = DocumentContext("pass\n", DEFAULT_RULES, markdown=False)
        assert not ctx.line_has_marker(99)
