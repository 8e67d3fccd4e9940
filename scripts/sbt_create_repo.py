#!/usr/bin/env python3
"""
Skill Builder Toolkit - GitHub Repository Creator

Creates a public GitHub repository for a skill package and adds topics for
discoverability. All GitHub access goes through the gh CLI.

Handles: pre-flight -> recommended files -> create + push -> topics -> summary.

Usage:
    sbt_create_repo.py --name my-skill-claude-skill \
                       --description "What the skill does" \
                       --topics claude,claude-code,my-topic
    sbt_create_repo.py --dry-run      # Pre-flight only, print the commands

Prerequisites:
    - gh CLI installed and authenticated
    - Git repository initialized in the current directory, with a commit
"""

from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
from pathlib import Path
from typing import NoReturn

from sbt_validation_common import EXIT_OK

DEFAULT_DESCRIPTION = "Claude Code skill"
DEFAULT_TOPICS = "claude,claude-code,claude-plugin"

# Files a published skill repository should carry
RECOMMENDED_FILES = ["README.md", "LICENSE", "package.json", "skills"]

# -- ANSI color helpers --
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
BOLD = "\033[1m"
RESET = "\033[0m"


def info(msg: str) -> None:
    print(f"{BLUE}ℹ{RESET} {msg}")


def success(msg: str) -> None:
    print(f"{GREEN}✓{RESET} {msg}")


def warn(msg: str) -> None:
    print(f"{YELLOW}⚠{RESET} {msg}")


def error(msg: str) -> None:
    print(f"{RED}✗{RESET} {msg}")


def fatal(msg: str, hint: str | None = None) -> NoReturn:
    """Print error (and a remediation hint) and exit with code 1."""
    error(msg)
    if hint:
        info(hint)
    sys.exit(1)


def run(cmd: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a subprocess command and return the result (check=False)."""
    return subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=False)


def parse_topics(value: str) -> list[str]:
    topics: list[str] = []
    for topic in value.split(","):
        topic = topic.strip().lower()
        if topic and topic not in topics:
            topics.append(topic)
    return topics


# ---------------------------------------------------------------------------
# Step 1: Pre-flight checks
# ---------------------------------------------------------------------------
def preflight_checks(cwd: Path) -> None:
    """Verify gh is installed and authenticated, and cwd is a committed git repo."""
    info(f"{BOLD}Pre-flight Checks{RESET}")

    if shutil.which("gh") is None or run(["gh", "--version"]).returncode != 0:
        fatal("gh CLI not installed", "Install: brew install gh && gh auth login")
    success("gh CLI installed")

    if run(["gh", "auth", "status"]).returncode != 0:
        fatal("gh CLI not authenticated", "Run: gh auth login")
    success("gh CLI authenticated")

    if not (cwd / ".git").exists():
        fatal("Not a git repository", "Run: git init")
    success("Git repository exists")

    if run(["git", "rev-parse", "HEAD"], cwd=cwd).returncode != 0:
        fatal("No commits found", 'Run: git add -A && git commit -m "Initial commit"')
    success("Has commits")


# ---------------------------------------------------------------------------
# Step 2: Recommended files
# ---------------------------------------------------------------------------
def check_recommended_files(cwd: Path) -> list[str]:
    """Report each recommended file; return the missing ones (never fatal)."""
    missing: list[str] = []
    for name in RECOMMENDED_FILES:
        if (cwd / name).exists():
            success(f"{name} exists")
        else:
            warn(f"{name} missing (recommended)")
            missing.append(name)
    return missing


def gh_username() -> str:
    """Login of the authenticated gh user."""
    result = run(["gh", "api", "user", "--jq", ".login"])
    if result.returncode != 0 or not result.stdout.strip():
        fatal(f"Could not determine GitHub username: {result.stderr.strip()}", "Run: gh auth status")
    return result.stdout.strip()


def create_command(name: str, description: str) -> list[str]:
    return ["gh", "repo", "create", name, "--public", "--description", description, "--source", ".", "--push"]


def topic_command(full_name: str, topics: list[str]) -> list[str]:
    cmd = ["gh", "repo", "edit", full_name]
    for topic in topics:
        cmd.extend(["--add-topic", topic])
    return cmd


# ---------------------------------------------------------------------------
# Step 3: Create repository and push
# ---------------------------------------------------------------------------
def create_repository(name: str, description: str, cwd: Path) -> None:
    """Create and push; if the repository already exists, push to it instead."""
    info("Creating GitHub repository...")
    result = run(create_command(name, description), cwd=cwd)
    if result.returncode == 0:
        success("Repository created and pushed")
        return

    warn("Repository may already exist, trying to push...")
    remote = f"https://github.com/{gh_username()}/{name}.git"
    if run(["git", "remote", "set-url", "origin", remote], cwd=cwd).returncode != 0:
        run(["git", "remote", "add", "origin", remote], cwd=cwd)

    push = run(["git", "push", "-u", "origin", "main"], cwd=cwd)
    if push.returncode != 0:
        fatal(f"Failed to push: {push.stderr.strip()}", "Check repository settings.")
    success("Pushed to existing repository")


# ---------------------------------------------------------------------------
# Step 4: Topics
# ---------------------------------------------------------------------------
def add_topics(full_name: str, topics: list[str]) -> bool:
    info("Adding topics for discoverability...")
    result = run(topic_command(full_name, topics))
    if result.returncode != 0:
        warn("Could not add all topics (some may be invalid)")
        return False
    success(f"Added {len(topics)} topics")
    return True


# ---------------------------------------------------------------------------
# Step 5: Summary
# ---------------------------------------------------------------------------
def print_summary(username: str, name: str) -> None:
    print()
    print("━" * 50)
    print(f"\n{GREEN}{BOLD}✓ Repository created successfully!{RESET}\n")
    print(f"{BOLD}URL:{RESET} https://github.com/{username}/{name}")
    print(f"{BOLD}Clone:{RESET} git clone https://github.com/{username}/{name}")
    print(f"{BOLD}Install:{RESET} claude plugin add github:{username}/{name}\n")
    print(f"{BOLD}Next Steps:{RESET}")
    print("1. Update README.md with specific usage instructions")
    print("2. Add more topics if needed: gh repo edit --add-topic <topic>")
    print("3. Create a release: gh release create v1.0.0")
    print()


def add_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", default=None, help="Repository name (default: current directory name)")
    parser.add_argument("--description", default=DEFAULT_DESCRIPTION, help="Repository description")
    parser.add_argument(
        "--topics",
        default=DEFAULT_TOPICS,
        help=f"Comma-separated topics (default: {DEFAULT_TOPICS})",
    )
    parser.add_argument("--dry-run", action="store_true", help="Run pre-flight checks and print the commands only")


def run_create(args: argparse.Namespace, cwd: Path | None = None) -> int:
    cwd = (cwd or Path.cwd()).resolve()
    name = args.name or cwd.name
    topics = parse_topics(args.topics)

    print(f"\n{BOLD}🚀 Creating GitHub Repository{RESET}\n")
    print("━" * 50)

    preflight_checks(cwd)
    check_recommended_files(cwd)

    info(f"Name: {name}")
    info(f"Description: {args.description}")
    info(f"Topics: {', '.join(topics)}")

    if args.dry_run:
        info("[DRY-RUN] Would run:")
        print(f"  {subprocess.list2cmdline(create_command(name, args.description))}")
        print(f"  {subprocess.list2cmdline(topic_command(f'<user>/{name}', topics))}")
        return EXIT_OK

    create_repository(name, args.description, cwd)
    username = gh_username()
    if topics:
        add_topics(f"{username}/{name}", topics)
    print_summary(username, name)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="create-repo",
        description="Create a public GitHub repository for a skill package via the gh CLI",
    )
    add_arguments(parser)
    return run_create(parser.parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
