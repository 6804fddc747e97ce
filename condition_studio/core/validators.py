"""Shared validators for Pydantic schemas.

The block tree checks run on the raw JSON before it is parsed into Block
models, so an oversized tree is rejected without being materialised.
"""

from typing import Any


def _children(node: dict[str, Any]) -> list[dict[str, Any]]:
    inputs = node.get("inputs")
    if not isinstance(inputs, list):
        return []
    return [
        block_input["connected"]
        for block_input in inputs
        if isinstance(block_input, dict) and isinstance(block_input.get("connected"), dict)
    ]


def validate_block_tree_depth(tree: dict, max_depth: int = 16, current_depth: int = 1) -> None:
    """
    Validate that a block tree doesn't exceed maximum depth.

    Args:
        tree: Block tree dictionary (wire format)
        max_depth: Maximum allowed number of block levels
        current_depth: Current depth in recursion

    Raises:
        ValueError: If tree exceeds maximum depth
    """
    if current_depth > max_depth:
        raise ValueError(f"Block tree exceeds maximum depth of {max_depth}")

    for child in _children(tree):
        validate_block_tree_depth(child, max_depth, current_depth + 1)


def validate_block_tree_node_count(trees: dict | list, max_nodes: int = 500) -> None:
    """
    Validate that one or more block trees don't exceed maximum node count.

    Every block counts, including value blocks connected to slots.

    Args:
        trees: A block tree dictionary or a list of them
        max_nodes: Maximum allowed blocks

    Raises:
        ValueError: If the trees exceed maximum node count
    """

    def count_nodes(node: dict) -> int:
        return 1 + sum(count_nodes(child) for child in _children(node))

    roots = trees if isinstance(trees, list) else [trees]
    node_count = sum(count_nodes(root) for root in roots if isinstance(root, dict))

    if node_count > max_nodes:
        raise ValueError(
            f"Block tree exceeds maximum node count of {max_nodes} (got {node_count} blocks)"
        )
