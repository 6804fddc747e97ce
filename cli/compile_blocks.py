"""
CLI: Compile a block-tree JSON file into a condition document.

Usage:
  condition-compile workspace.json
  condition-compile --strict --canonical - < workspace.json

The input is a single root block, a list of workspace blocks, or an object
with a "blocks" list. The display JSON is written to stdout; nothing is
written when the tree compiles to no condition.

Exit codes: 0 on success (including no condition), 2 on invalid input or a
compile error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from condition_studio.blocks.models import Block
from condition_studio.compiler.canonicalizer import (
    condition_fingerprint,
    to_canonical_json_string,
    to_condition_json,
)
from condition_studio.compiler.compiler import compile_blocks
from condition_studio.core.errors import ConditionStudioError, ValidationError

logger = logging.getLogger("condition_studio.cli")

_blocks_adapter = TypeAdapter(list[Block])


def load_blocks(data: Any) -> list[Block]:
    """
    Parse the accepted input shapes into blocks.

    Raises:
        ValidationError: If the data is not a block, a block list or {"blocks": [...]}
    """
    if isinstance(data, dict) and "blocks" in data:
        data = data["blocks"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValidationError(
            "Input must be a block, a list of blocks or an object with a 'blocks' list",
            details={"type": type(data).__name__},
        )
    try:
        return _blocks_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Input is not a valid block tree",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def _read_input(source: str) -> Any:
    try:
        if source == "-":
            return json.load(sys.stdin)
        with open(source, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Input is not valid JSON: {e.msg}", details={"line": e.lineno, "column": e.colno}
        ) from e
    except OSError as e:
        raise ValidationError(
            f"Cannot read {source}: {e.strerror}", details={"source": source}
        ) from e


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="condition-compile",
        description="Compile a block-tree JSON file into a condition document",
    )
    parser.add_argument("file", help="Block tree JSON file, or - for stdin")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on incomplete conditions instead of dropping them",
    )
    parser.add_argument(
        "--canonical",
        action="store_true",
        help="Print sorted-key compact JSON followed by its SHA-256 fingerprint",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log dropped conditions")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        blocks = load_blocks(_read_input(args.file))
        condition = compile_blocks(blocks, strict=args.strict)
    except ConditionStudioError as e:
        print(f"[ERROR] {e.__class__.__name__}: {e.message}", file=sys.stderr)
        for key, value in e.details.items():
            print(f"   {key}: {value}", file=sys.stderr)
        return 2

    if condition is None:
        logger.info("Block tree compiles to no condition")
        return 0

    if args.canonical:
        print(to_canonical_json_string(condition))
        print(condition_fingerprint(condition))
    else:
        print(to_condition_json(condition))
    return 0


def run() -> None:
    sys.exit(main())
