"""
Condition Compiler for Condition Studio.

This package turns a block composition into the condition document consumed
by the threshold-decryption network.

Key Components:
- ast: Typed condition AST (time, rpc, contract, compound)
- chains: Chain id policy shared by every call site
- compiler: Block tree to condition AST
- validator: Structural checks on plain condition documents
- canonicalizer: Display JSON, canonical JSON and fingerprints

Design Principles:
- Determinism: Same tree produces a structurally equal condition
- Totality: Incomplete subtrees compile to absent instead of failing
- Honesty: An entered chain id is validated, never replaced
"""

from condition_studio.compiler.canonicalizer import (
    canonicalize_json,
    condition_fingerprint,
    to_canonical_json_string,
    to_condition_json,
)
from condition_studio.compiler.chains import resolve_chain
from condition_studio.compiler.compiler import compile_blocks, compile_to_document
from condition_studio.compiler.validator import (
    parse_condition_document,
    validate_condition_document,
)

__all__ = [
    "compile_blocks",
    "compile_to_document",
    "resolve_chain",
    "validate_condition_document",
    "parse_condition_document",
    "canonicalize_json",
    "to_canonical_json_string",
    "to_condition_json",
    "condition_fingerprint",
]
