#!/usr/bin/env python3
"""
Skill Builder Toolkit - Documentation Context Detection

Skill documents routinely show dangerous commands as examples of what NOT to
do. This module decides whether a matched line is such an example.

Markdown files are read structurally:
1. A line carrying a marker itself (❌, NEVER, "don't", "Example:") is an example
2. Every line in a section whose heading names anti-patterns is an example,
   until a heading of the same or a higher level closes that section
3. Every line of a fenced code block is an example when the fence is
   introduced by a marker just above it (within the same section), or when
   the block contains a marker

Other files have no structure to read and fall back to a line window: a match
is an example when any line within ``context_window`` lines carries a marker.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sbt_scan_rules import PatternRule, ScanRules

_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


@dataclass(frozen=True)
class FencedBlock:
    """Line span of a fenced code block, opening and closing fence included."""

    start: int
    end: int


def _matches_any(rules: tuple[PatternRule, ...], text: str) -> bool:
    return any(r.search(text) for r in rules)


def find_fenced_blocks(lines: list[str]) -> list[FencedBlock]:
    """Locate fenced code blocks.

    A block closes on a line made only of the opening fence character, at
    least as long as the opening fence. An unclosed block runs to the end.
    """
    blocks: list[FencedBlock] = []
    open_index: int | None = None
    open_fence = ""

    for index, line in enumerate(lines):
        match = _FENCE_RE.match(line)
        if open_index is None:
            if match:
                open_index = index
                open_fence = match.group(1)
            continue

        stripped = line.strip()
        if (
            match
            and stripped.startswith(open_fence)
            and set(stripped) == {open_fence[0]}
        ):
            blocks.append(FencedBlock(open_index, index))
            open_index = None

    if open_index is not None:
        blocks.append(FencedBlock(open_index, len(lines) - 1))
    return blocks


class DocumentContext:
    """Documentation-context oracle for one file's content."""

    def __init__(self, content: str, rules: ScanRules, markdown: bool) -> None:
        self.lines = content.split("\n")
        self.window = rules.context_window
        self._markers = rules.documentation_markers
        self._marker_lines = [_matches_any(self._markers, line) for line in self.lines]
        self._example_lines: set[int] | None = None
        if markdown:
            self._example_lines = self._structural_examples(rules.anti_pattern_headings)

    def line_has_marker(self, index: int) -> bool:
        return 0 <= index < len(self._marker_lines) and self._marker_lines[index]

    def is_documentation(self, index: int) -> bool:
        """True when the 0-based line ``index`` is a documented example."""
        if self.line_has_marker(index):
            return True
        if self._example_lines is not None:
            return index in self._example_lines
        return self._window_has_marker(index)

    def _window_has_marker(self, index: int) -> bool:
        start = max(0, index - self.window)
        end = min(len(self.lines), index + self.window + 1)
        return any(self._marker_lines[start:end])

    def _structural_examples(self, heading_rules: tuple[PatternRule, ...]) -> set[int]:
        examples: set[int] = set()
        blocks = find_fenced_blocks(self.lines)

        fenced: set[int] = set()
        for block in blocks:
            fenced.update(range(block.start, block.end + 1))

        # Anti-pattern sections
        stack: list[tuple[int, bool]] = []
        headings: list[int] = []
        for index, line in enumerate(self.lines):
            if index not in fenced:
                match = _HEADING_RE.match(line)
                if match:
                    headings.append(index)
                    level = len(match.group(1))
                    while stack and stack[-1][0] >= level:
                        stack.pop()
                    stack.append((level, _matches_any(heading_rules, match.group(2))))
            if any(anti for _, anti in stack):
                examples.add(index)

        # Fenced blocks introduced by, or containing, a marker.
        # The intro stops at the previous fence and at the nearest heading.
        previous_end = -1
        for block in blocks:
            intro_start = max(previous_end + 1, block.start - self.window)
            for heading in headings:
                if intro_start <= heading < block.start:
                    intro_start = heading + 1
            introduced = any(self._marker_lines[intro_start : block.start + 1])
            contains = any(self._marker_lines[block.start : block.end + 1])
            if introduced or contains:
                examples.update(range(block.start, block.end + 1))
            previous_end = block.end

        return examples
