"""
Block tree model.

A Block is a node in the user's visual composition. Each Block owns an
ordered list of BlockInput slots, and a slot either carries a literal value
or exclusively owns a connected child Block. Ownership is strictly
parent -> child, so a tree parsed from JSON can never contain a cycle.

Field names follow the JSON the hosting UI exchanges (`type`, `inputType`,
`isTemplate`); Python attributes use snake_case.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from condition_studio.core.errors import ValidationError
from condition_studio.domain.enums import BlockKind, Comparator

PARAM_SLOT_PATTERN = re.compile(r"^param_(\d+)$")
GROWTH_SLOT_PATTERN = re.compile(r"^condition-(\d+)$")


class BlockInput(BaseModel):
    """A named slot on a Block."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    accepts: list[BlockKind] = Field(default_factory=list, alias="type")
    label: str = ""
    value: str | int | float | None = None
    comparator: Comparator | None = None
    input_type: str | None = Field(default=None, alias="inputType")
    connected: Block | None = None

    @property
    def is_empty(self) -> bool:
        """True when nothing is connected to the slot."""
        return self.connected is None


class Block(BaseModel):
    """A node in the visual tree: a condition, an operator or a literal value."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    kind: BlockKind = Field(alias="type")
    category: str = ""
    label: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)
    inputs: list[BlockInput] = Field(default_factory=list)
    value: str | int | float | None = None
    is_template: bool = Field(default=False, alias="isTemplate")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Block ids must be non-blank."""
        if not v or not v.strip():
            raise ValueError("Block id cannot be empty")
        return v

    def find_input(self, slot_id: str) -> BlockInput | None:
        """Return the slot with the given id, if any."""
        for block_input in self.inputs:
            if block_input.id == slot_id:
                return block_input
        return None

    def connected_inputs(self) -> list[BlockInput]:
        """Slots that own a child block, in positional order."""
        return [block_input for block_input in self.inputs if block_input.connected is not None]

    @property
    def max_inputs(self) -> int | None:
        """Operand bound of an operator block, if one is set."""
        raw = self.properties.get("maxInputs")
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            return None
        return raw

    def to_wire(self) -> dict[str, Any]:
        """Serialize with the UI's field names, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


BlockInput.model_rebuild()


def iter_blocks(block: Block) -> Iterator[Block]:
    """Yield a block and every block it owns, depth first, in slot order."""
    yield block
    for block_input in block.inputs:
        if block_input.connected is not None:
            yield from iter_blocks(block_input.connected)


def connected_block_ids(blocks: Iterable[Block]) -> set[str]:
    """Ids of every block that sits in some other block's slot."""
    referenced: set[str] = set()
    for block in blocks:
        for nested in iter_blocks(block):
            for block_input in nested.inputs:
                if block_input.connected is not None:
                    referenced.add(block_input.connected.id)
    return referenced


def find_top_level_blocks(blocks: Iterable[Block]) -> list[Block]:
    """
    Return the blocks not referenced as another block's connected child.

    Workspace order is preserved.
    """
    blocks = list(blocks)
    referenced = connected_block_ids(blocks)
    return [block for block in blocks if block.id not in referenced]


def tree_depth(block: Block) -> int:
    """Number of block levels in the tree (a lone block has depth 1)."""
    children = [block_input.connected for block_input in block.connected_inputs()]
    if not children:
        return 1
    return 1 + max(tree_depth(child) for child in children)


def check_invariants(root: Block) -> None:
    """
    Verify the structural invariants of a block tree.

    Checks:
    1. Block ids are unique across the tree
    2. Operators expose exactly one trailing empty growth slot, or none once
       their maxInputs bound is reached
    3. param_N slots are contiguous from zero and parameterCount matches them

    Raises:
        ValidationError: On the first violated invariant
    """
    seen: set[str] = set()
    for block in iter_blocks(root):
        if block.id in seen:
            raise ValidationError(
                f"Duplicate block id '{block.id}'", details={"block_id": block.id}
            )
        seen.add(block.id)

        if block.kind == BlockKind.OPERATOR:
            _check_operator_slots(block)
        _check_parameter_slots(block)


def _check_operator_slots(block: Block) -> None:
    connected_count = len(block.connected_inputs())
    empty_positions = [
        index for index, block_input in enumerate(block.inputs) if block_input.connected is None
    ]
    bound = block.max_inputs

    if bound is not None and connected_count >= bound:
        if empty_positions:
            raise ValidationError(
                f"Operator '{block.id}' has reached maxInputs but still exposes an empty slot",
                details={"block_id": block.id, "max_inputs": bound},
            )
        return

    if empty_positions != [len(block.inputs) - 1]:
        raise ValidationError(
            f"Operator '{block.id}' must expose exactly one trailing empty slot",
            details={"block_id": block.id, "empty_positions": empty_positions},
        )


def _check_parameter_slots(block: Block) -> None:
    indices = sorted(
        int(match.group(1))
        for match in (PARAM_SLOT_PATTERN.match(block_input.id) for block_input in block.inputs)
        if match
    )
    if not indices:
        return

    if indices != list(range(len(indices))):
        raise ValidationError(
            f"Parameter slots of '{block.id}' are not contiguous",
            details={"block_id": block.id, "indices": indices},
        )

    count = block.properties.get("parameterCount")
    if count != len(indices):
        raise ValidationError(
            f"parameterCount of '{block.id}' does not match its parameter slots",
            details={"block_id": block.id, "parameter_count": count, "slots": len(indices)},
        )
