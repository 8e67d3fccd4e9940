#!/usr/bin/env python3
"""Tests for gitignore_filter.py - .gitignore matching and sorted file walking."""

from pathlib import Path

from gitignore_filter import GitignoreFilter, is_path_gitignored, parse_gitignore


class TestPatternMatching:
    def test_basename_pattern_matches_any_depth(self) -> None:
        assert is_path_gitignored("a/b/debug.log", ["*.log"])

    def test_directory_only_pattern(self) -> None:
        assert is_path_gitignored("build", ["build/"], is_dir=True)
        assert not is_path_gitignored("build", ["build/"], is_dir=False)

    def test_anchored_pattern(self) -> None:
        assert is_path_gitignored("docs/draft.md", ["/docs/draft.md"])
        assert not is_path_gitignored("other/docs/draft.md", ["/docs/draft.md"])

    def test_negation_reincludes(self) -> None:
        patterns = ["*.md", "!keep.md"]
        assert is_path_gitignored("drop.md", patterns)
        assert not is_path_gitignored("keep.md", patterns)


class TestParseGitignore:
    def test_skips_comments_and_blanks(self, tmp_path: Path) -> None:
        path = tmp_path / ".gitignore"
        path.write_text("# comment\n\n*.log\n  dist/  \n")
        assert parse_gitignore(path) == ["*.log", "dist/"]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert parse_gitignore(tmp_path / ".gitignore") == []


class TestWalkFiles:
    def test_sorted_filtered_walk(self, tmp_path: Path) -> None:
        (tmp_path / ".gitignore").write_text("ignored/\n*.tmp.md\n")
        for rel in ["b.md", "a.py", "sub/c.md", "ignored/x.md", "notes.tmp.md", "data.json", ".git/HEAD.md"]:
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("x\n")

        gi = GitignoreFilter(tmp_path)
        found = [p.relative_to(tmp_path).as_posix() for p in gi.walk_files({".git"}, {".md", ".py"})]
        assert found == ["a.py", "b.md", "sub/c.md"]

    def test_symlinked_directory_not_followed(self, tmp_path: Path) -> None:
        """A directory link back to the root is skipped, so each file is yielded once."""
        (tmp_path / "SKILL.md").write_text("x\n")
        (tmp_path / "loop").symlink_to(tmp_path, target_is_directory=True)

        found = [p.relative_to(tmp_path).as_posix() for p in GitignoreFilter(tmp_path).walk_files()]
        assert found == ["SKILL.md"]
