"""
Shared CLI runner helper.

Developer wrappers run their tool in a subprocess with the current
interpreter and exit with the tool's exit code.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence


def run(cmd: Sequence[str], env: Mapping[str, str] | None = None) -> None:
    """
    Run a command and propagate its exit code.

    Args:
        cmd: Command and arguments to execute
        env: Variables set on top of the current environment, unless already set

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"], env={"APP_ENV": "test"})
    """
    merged = dict(os.environ)
    for key, value in (env or {}).items():
        merged.setdefault(key, value)
    result = subprocess.run(cmd, env=merged)
    raise SystemExit(result.returncode)
