#!/usr/bin/env python3
"""Tests for sbt_cli.py - the skill-builder umbrella command."""

from pathlib import Path

import pytest

from sbt_cli import main, parse_args

SKILL_MD = """---
name: demo-skill
description: This skill should be used when the user asks to "run the demo".
---

# Demo
"""


class TestSubcommands:
    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit) as exc:
            parse_args([])
        assert exc.value.code == 2

    def test_validate_dispatch(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (tmp_path / "SKILL.md").write_text(SKILL_MD, encoding="utf-8")
        assert main(["validate", str(tmp_path)]) == 0
        assert "PASSED" in capsys.readouterr().out

    def test_validate_failure_exit_code(self, tmp_path: Path) -> None:
        (tmp_path / "SKILL.md").write_text(SKILL_MD + "\necho $API_KEY\n", encoding="utf-8")
        assert main(["validate", str(tmp_path), "--json"]) == 1

    def test_generate_subagent_dispatch(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        skill = tmp_path / "skill"
        skill.mkdir()
        (skill / "SKILL.md").write_text(SKILL_MD, encoding="utf-8")
        assert main(["generate-subagent", str(skill), "--dry-run"]) == 0
        assert "demo-skill-specialist.md" in capsys.readouterr().out

    def test_create_repo_arguments(self) -> None:
        ns = parse_args(["create-repo", "--name", "demo", "--topics", "a,b", "--dry-run"])
        assert ns.name == "demo"
        assert ns.topics == "a,b"
        assert ns.dry_run
