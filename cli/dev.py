"""CLI wrapper: Start the API with auto-reload."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "condition_studio.main:app",
            "--reload",
            "--reload-dir",
            "condition_studio",
            "--host",
            "127.0.0.1",
            "--port",
            "8000",
            *sys.argv[1:],
        ],
        env={"APP_ENV": "local"},
    )
