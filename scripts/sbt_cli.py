#!/usr/bin/env python3
"""
Skill Builder Toolkit - command line entry point

Usage:
    skill-builder validate path/to/skill [--rules FILE] [--json] [--verbose]
    skill-builder generate-subagent path/to/skill [--output DIR] [--dry-run]
    skill-builder create-repo [--name NAME] [--topics a,b,c] [--dry-run]
"""

from __future__ import annotations

import argparse
import sys

import sbt_create_repo
import sbt_generate_subagent
import validate_skill


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="skill-builder",
        description="Validate skills, generate specialist subagents and publish skill repositories",
    )
    sub = p.add_subparsers(dest="subcmd", required=True)

    p_validate = sub.add_parser("validate", help="Validate a skill directory before publishing")
    validate_skill.add_arguments(p_validate)
    p_validate.set_defaults(func=validate_skill.run)

    p_generate = sub.add_parser("generate-subagent", help="Generate a companion specialist subagent")
    sbt_generate_subagent.add_arguments(p_generate)
    p_generate.set_defaults(func=sbt_generate_subagent.run)

    p_repo = sub.add_parser("create-repo", help="Create a public GitHub repository via the gh CLI")
    sbt_create_repo.add_arguments(p_repo)
    p_repo.set_defaults(func=sbt_create_repo.run_create)

    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    ns = parse_args(argv)
    return ns.func(ns)


if __name__ == "__main__":
    sys.exit(main())
