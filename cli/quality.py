"""CLI wrappers: Lint and format with ruff."""

from __future__ import annotations

import sys

from cli._runner import run

SOURCE_DIRS = ("condition_studio", "cli", "tests")


def lint() -> None:
    run([sys.executable, "-m", "ruff", "check", *SOURCE_DIRS, *sys.argv[1:]])


def format_code() -> None:
    run([sys.executable, "-m", "ruff", "format", *SOURCE_DIRS, *sys.argv[1:]])
