#!/usr/bin/env python3
"""Gitignore-aware file walking for skill validation.

Provides a GitignoreFilter class that loads a skill's .gitignore once and
yields the files a scan should look at, in a stable sorted order.

Usage:
    gi = GitignoreFilter(skill_root)
    for path in gi.walk_files(skip_dirs=SKIP_DIRS, extensions={".md", ".py"}):
        # path is a Path object, gitignored files are excluded
        ...
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterator
from pathlib import Path


def parse_gitignore(gitignore_path: Path) -> list[str]:
    """Parse a .gitignore file and return list of patterns.

    Comments and empty lines are stripped; an unreadable file yields no patterns.
    """
    patterns: list[str] = []
    try:
        with open(gitignore_path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                patterns.append(line)
    except (OSError, UnicodeDecodeError):
        return []
    return patterns


def is_path_gitignored(rel_path: str, patterns: list[str], is_dir: bool = False) -> bool:
    """Check if a forward-slash relative path matches any gitignore pattern.

    Negations are honoured in file order: a later ``!pattern`` re-includes a
    path an earlier pattern excluded.
    """
    rel_path = rel_path.replace("\\", "/").strip("/")
    path_parts = rel_path.split("/")
    ignored = False

    for raw in patterns:
        negate = raw.startswith("!")
        pattern = raw[1:] if negate else raw

        # Directory-only patterns (ending with /)
        if pattern.endswith("/"):
            if not is_dir:
                continue
            pattern = pattern[:-1]

        anchored = pattern.startswith("/") or "/" in pattern.rstrip("/")
        pattern = pattern.lstrip("/")
        if "**" in pattern:
            pattern = pattern.replace("**/", "*/").replace("/**", "/*")

        if anchored:
            matched = fnmatch.fnmatch(rel_path, pattern)
        else:
            matched = fnmatch.fnmatch(rel_path, pattern) or any(fnmatch.fnmatch(part, pattern) for part in path_parts)

        if matched:
            ignored = not negate

    return ignored


class GitignoreFilter:
    """Gitignore-aware file filter. Patterns are loaded once per scan root."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        gitignore_path = self.root / ".gitignore"
        self.patterns = parse_gitignore(gitignore_path) if gitignore_path.is_file() else []

    def is_ignored(self, path: Path, is_dir: bool = False) -> bool:
        """Check if a path should be skipped based on .gitignore patterns."""
        if not self.patterns:
            return False
        try:
            rel = path.resolve().relative_to(self.root).as_posix()
        except ValueError:
            return False
        return is_path_gitignored(rel, self.patterns, is_dir=is_dir)

    def walk_files(
        self,
        skip_dirs: set[str] | None = None,
        extensions: set[str] | frozenset[str] | None = None,
        directory: Path | None = None,
    ) -> Iterator[Path]:
        """Yield non-ignored files under ``directory`` (default: root), sorted.

        Symlinked directories are never followed, so a link cycle cannot
        yield the same file twice.

        Args:
            skip_dirs: Directory names never descended into
            extensions: Lower-case suffixes to keep; None keeps every file
        """
        skip = skip_dirs or set()
        directory = directory or self.root

        try:
            entries = sorted(directory.iterdir())
        except (PermissionError, FileNotFoundError):
            return

        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_dir():
                if entry.is_symlink() or entry.name in skip or self.is_ignored(entry, is_dir=True):
                    continue
                subdirs.append(entry)
            elif entry.is_file():
                if extensions is not None and entry.suffix.lower() not in extensions:
                    continue
                if not self.is_ignored(entry):
                    yield entry

        for subdir in subdirs:
            yield from self.walk_files(skip, extensions, subdir)
