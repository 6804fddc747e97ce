"""
Block tree editor.

Pure, copy-on-write operations that turn one well-formed tree into another.
Every operation deep-copies the root it receives, edits the copy and returns
it, so a tree snapshot held elsewhere is never mutated.

Slots are addressed by a path: the input ids to follow from the root down to
the block that owns the target slot. An empty path addresses the root itself.
"""

import logging
import uuid
from collections.abc import Sequence

from condition_studio.blocks.models import (
    GROWTH_SLOT_PATTERN,
    PARAM_SLOT_PATTERN,
    Block,
    BlockInput,
    iter_blocks,
)
from condition_studio.core.errors import ConflictError, NotFoundError, ValidationError
from condition_studio.domain.enums import (
    EDITOR_COMPARATORS,
    NUMERIC_TEST_SLOTS,
    BlockKind,
    Comparator,
    InputType,
)

logger = logging.getLogger(__name__)

GROWTH_SLOT_LABEL = "Add Condition"


def new_block_id(prefix: str) -> str:
    """Generate a unique block id derived from the template id."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def attach(root: Block, path: Sequence[str], slot_id: str, template: Block) -> Block:
    """
    Drop a template block onto a slot.

    The template is cloned with fresh ids and connected to the slot. A
    value-kind template writes its literal into the slot instead. When the
    owner is an operator and the trailing growth slot was filled, a new
    growth slot is appended unless the maxInputs bound has been reached.

    Args:
        root: Current root block
        path: Input ids leading from the root to the slot's owner
        slot_id: Id of the slot to fill
        template: Prototype to instantiate

    Returns:
        New root block

    Raises:
        NotFoundError: If the path or slot does not exist
        ValidationError: If the slot does not accept the template's kind
        ConflictError: If the operator's maxInputs bound is already reached
    """
    new_root = root.model_copy(deep=True)
    owner = _resolve_owner(new_root, path)
    slot = _require_slot(owner, slot_id, path)

    if slot.accepts and template.kind not in slot.accepts:
        raise ValidationError(
            f"Slot '{slot_id}' does not accept {template.kind.value} blocks",
            details={
                "slot_id": slot_id,
                "accepts": [kind.value for kind in slot.accepts],
                "kind": template.kind.value,
            },
        )

    if template.kind == BlockKind.VALUE:
        slot.value = template.value if template.value is not None else ""
        logger.debug("Wrote value block %s into slot %s", template.id, slot_id)
        return new_root

    if owner.kind == BlockKind.OPERATOR:
        bound = owner.max_inputs
        if slot.connected is None and bound is not None and len(owner.connected_inputs()) >= bound:
            raise ConflictError(
                f"Operator '{owner.id}' already has {bound} operand(s)",
                details={"block_id": owner.id, "max_inputs": bound},
            )

    slot.connected = _instantiate(template)

    if owner.kind == BlockKind.OPERATOR:
        _relabel_operands(owner)
        connected_count = len(owner.connected_inputs())
        bound = owner.max_inputs
        was_trailing = owner.inputs[-1].id == slot_id
        if was_trailing and (bound is None or connected_count < bound):
            owner.inputs.append(_growth_slot(owner.inputs))

    logger.debug(
        "Attached %s at %s/%s", slot.connected.id, "/".join(path) or "<root>", slot_id
    )
    return new_root


def detach(root: Block, path: Sequence[str], slot_id: str) -> Block:
    """
    Remove the block connected to a slot.

    For operator owners the input list is rebuilt as the remaining operands,
    relabelled Condition 1..k, followed by exactly one fresh growth slot.

    Raises:
        NotFoundError: If the path or slot does not exist
    """
    new_root = root.model_copy(deep=True)
    owner = _resolve_owner(new_root, path)
    slot = _require_slot(owner, slot_id, path)
    slot.connected = None

    if owner.kind == BlockKind.OPERATOR:
        operands = owner.connected_inputs()
        _relabel_operands(owner)
        owner.inputs = [*operands, _growth_slot(operands)]

    logger.debug("Detached %s/%s", "/".join(path) or "<root>", slot_id)
    return new_root


def set_value(root: Block, path: Sequence[str], slot_id: str, value: str | int | float) -> Block:
    """
    Set the literal value of a slot. The slot's connected block is left alone.

    Raises:
        NotFoundError: If the path or slot does not exist
    """
    new_root = root.model_copy(deep=True)
    owner = _resolve_owner(new_root, path)
    slot = _require_slot(owner, slot_id, path)
    slot.value = value
    return new_root


def set_comparator(
    root: Block, slot_id: str, comparator: str | Comparator, path: Sequence[str] = ()
) -> Block:
    """
    Set the comparator of a numeric-test slot.

    Raises:
        ValidationError: If the comparator is not selectable or the slot is
            not a numeric-test slot
        NotFoundError: If the path or slot does not exist
    """
    try:
        parsed = Comparator(comparator)
    except ValueError:
        parsed = None
    if parsed not in EDITOR_COMPARATORS:
        raise ValidationError(
            f"Invalid comparator '{comparator}'",
            details={
                "comparator": str(comparator),
                "allowed": sorted(c.value for c in EDITOR_COMPARATORS),
            },
        )

    if slot_id not in NUMERIC_TEST_SLOTS:
        raise ValidationError(
            f"Slot '{slot_id}' does not take a comparator",
            details={"slot_id": slot_id, "numeric_slots": sorted(NUMERIC_TEST_SLOTS)},
        )

    new_root = root.model_copy(deep=True)
    owner = _resolve_owner(new_root, path)
    slot = _require_slot(owner, slot_id, path)
    slot.comparator = parsed
    return new_root


def add_parameter_slot(root: Block, path: Sequence[str] = ()) -> Block:
    """
    Append a param_<n> slot to a block.

    The slot is inserted right after the last existing parameter slot, or at
    the end when there is none, and parameterCount is incremented.

    Raises:
        NotFoundError: If the path does not exist
        ConflictError: If parameterCount is out of sync with the slots
    """
    new_root = root.model_copy(deep=True)
    owner = _resolve_owner(new_root, path)

    param_positions = [
        index
        for index, block_input in enumerate(owner.inputs)
        if PARAM_SLOT_PATTERN.match(block_input.id)
    ]
    count = owner.properties.get("parameterCount")
    if isinstance(count, bool) or not isinstance(count, int):
        count = len(param_positions)

    new_id = f"param_{count}"
    if owner.find_input(new_id) is not None:
        raise ConflictError(
            f"Block '{owner.id}' already has a slot '{new_id}'",
            details={"block_id": owner.id, "parameter_count": count},
        )

    new_slot = BlockInput(
        id=new_id,
        accepts=[BlockKind.VALUE],
        label=f"Parameter {count + 1}",
        value="",
        input_type=InputType.TEXT.value,
    )
    if param_positions:
        owner.inputs.insert(param_positions[-1] + 1, new_slot)
    else:
        owner.inputs.append(new_slot)

    owner.properties["parameterCount"] = count + 1
    return new_root


def _resolve_owner(root: Block, path: Sequence[str]) -> Block:
    """Follow connected slots from the root along the path."""
    current = root
    for depth, input_id in enumerate(path):
        block_input = current.find_input(input_id)
        if block_input is None or block_input.connected is None:
            raise NotFoundError(
                f"No connected block at path segment '{input_id}'",
                details={"path": list(path), "depth": depth, "block_id": current.id},
            )
        current = block_input.connected
    return current


def _require_slot(owner: Block, slot_id: str, path: Sequence[str]) -> BlockInput:
    slot = owner.find_input(slot_id)
    if slot is None:
        raise NotFoundError(
            f"Block '{owner.id}' has no slot '{slot_id}'",
            details={
                "path": list(path),
                "slot_id": slot_id,
                "available": [block_input.id for block_input in owner.inputs],
            },
        )
    return slot


def _instantiate(template: Block) -> Block:
    """Clone a template into a placed block with fresh ids and initialized inputs."""
    block = template.model_copy(deep=True)
    for nested in iter_blocks(block):
        nested.id = new_block_id(nested.id)
        nested.is_template = False

    for block_input in block.inputs:
        if block_input.value is None:
            block_input.value = ""
        if block_input.input_type is None:
            block_input.input_type = InputType.TEXT.value
    return block


def _relabel_operands(operator: Block) -> None:
    for index, block_input in enumerate(operator.connected_inputs(), start=1):
        block_input.label = f"Condition {index}"


def _growth_slot(existing: Sequence[BlockInput]) -> BlockInput:
    """An empty operand slot whose id is unique among the existing slots."""
    numbers = [
        int(match.group(1))
        for match in (GROWTH_SLOT_PATTERN.match(block_input.id) for block_input in existing)
        if match
    ]
    return BlockInput(
        id=f"condition-{max(numbers, default=0) + 1}",
        accepts=[BlockKind.CONDITION, BlockKind.OPERATOR],
        label=GROWTH_SLOT_LABEL,
    )
