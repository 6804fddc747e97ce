import pytest

from condition_studio.core.validators import (
    validate_block_tree_depth,
    validate_block_tree_node_count,
)
from tests.conftest import operator_block, time_block


def nested(depth: int) -> dict:
    tree = time_block()
    for level in range(depth - 1):
        tree = operator_block(f"and-{level}", "and", tree)
    return tree


@pytest.mark.anyio
async def test_depth_within_limit():
    validate_block_tree_depth(nested(4), max_depth=4)


@pytest.mark.anyio
async def test_depth_exceeds_limit():
    with pytest.raises(ValueError, match="maximum depth of 3"):
        validate_block_tree_depth(nested(4), max_depth=3)


@pytest.mark.anyio
async def test_connected_value_blocks_count_towards_depth():
    tree = time_block()
    tree["inputs"][0]["connected"] = {"id": "chain-amoy-1", "type": "value", "value": "80002"}

    with pytest.raises(ValueError):
        validate_block_tree_depth(tree, max_depth=1)


@pytest.mark.anyio
async def test_node_count_over_list_of_trees():
    trees = [
        operator_block("and-1", "and", time_block("t-1"), time_block("t-2")),
        time_block("t-3"),
    ]

    validate_block_tree_node_count(trees, max_nodes=4)
    with pytest.raises(ValueError, match="got 4 blocks"):
        validate_block_tree_node_count(trees, max_nodes=3)


@pytest.mark.anyio
async def test_malformed_input_is_left_to_schema_validation():
    validate_block_tree_depth({"inputs": "nope"}, max_depth=1)
    validate_block_tree_node_count([None, "x"], max_nodes=1)
