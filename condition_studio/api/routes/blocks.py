"""
API routes for block tree editing.

The service keeps no tree state: each request carries the current root, the
editor returns a new root, and the response carries that root together with
the condition re-derived from it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import APIRouter

from condition_studio.api.schemas.blocks import (
    AddParameterRequest,
    AttachRequest,
    DetachRequest,
    EditorResponse,
    SetComparatorRequest,
    SetValueRequest,
)
from condition_studio.blocks import editor
from condition_studio.blocks.catalog import get_template
from condition_studio.blocks.models import Block, iter_blocks, tree_depth
from condition_studio.compiler.compiler import compile_to_document
from condition_studio.core.config import settings
from condition_studio.core.errors import ConditionStudioError, ValidationError
from condition_studio.core.observability import metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blocks", tags=["blocks"])


def _check_tree_limits(root: Block) -> Block:
    """
    Reject an edited tree beyond the configured depth and size limits.

    Request trees are checked on the way in; this catches trees that only
    grow past a limit through the edit, e.g. attaching a deep inline template.

    Raises:
        ValidationError: If the new tree is too deep or has too many blocks
    """
    depth = tree_depth(root)
    if depth > settings.block_tree_max_depth:
        raise ValidationError(
            f"Block tree exceeds maximum depth of {settings.block_tree_max_depth}",
            details={"depth": depth, "max_depth": settings.block_tree_max_depth},
        )

    node_count = sum(1 for _ in iter_blocks(root))
    if node_count > settings.block_tree_max_nodes:
        raise ValidationError(
            f"Block tree exceeds maximum node count of {settings.block_tree_max_nodes} "
            f"(got {node_count} blocks)",
            details={"node_count": node_count, "max_nodes": settings.block_tree_max_nodes},
        )
    return root


def _apply(operation: str, edit: Callable[[], Block]) -> EditorResponse:
    """
    Run an editor operation and re-derive the condition from the new tree.

    Editor errors propagate to the exception handlers. Compile errors do not
    undo the edit: they are reported in the response's `error` field.
    """
    try:
        new_root = _check_tree_limits(edit())
    except ConditionStudioError:
        metrics.editor_operations_total.labels(operation=operation, status="error").inc()
        raise
    metrics.editor_operations_total.labels(operation=operation, status="success").inc()

    try:
        condition = compile_to_document(new_root, strict=False)
    except ConditionStudioError as e:
        logger.info(
            "Edited tree does not compile: %s",
            e.message,
            extra={"operation": operation, "details": e.details},
        )
        return EditorResponse(root=new_root.to_wire(), condition=None, error=e.message)

    return EditorResponse(root=new_root.to_wire(), condition=condition)


@router.post("/attach")
async def attach_block(payload: AttachRequest) -> EditorResponse:
    """Drop a template onto a slot."""

    def edit() -> Block:
        template = payload.template or get_template(payload.template_id)
        return editor.attach(payload.root, payload.path, payload.slot_id, template)

    return _apply("attach", edit)


@router.post("/detach")
async def detach_block(payload: DetachRequest) -> EditorResponse:
    """Remove the block connected to a slot."""
    return _apply("detach", lambda: editor.detach(payload.root, payload.path, payload.slot_id))


@router.post("/value")
async def set_slot_value(payload: SetValueRequest) -> EditorResponse:
    """Set the literal value of a slot."""
    return _apply(
        "set_value",
        lambda: editor.set_value(payload.root, payload.path, payload.slot_id, payload.value),
    )


@router.post("/comparator")
async def set_slot_comparator(payload: SetComparatorRequest) -> EditorResponse:
    """Set the comparator of a numeric-test slot."""
    return _apply(
        "set_comparator",
        lambda: editor.set_comparator(
            payload.root, payload.slot_id, payload.comparator, path=payload.path
        ),
    )


@router.post("/parameters")
async def add_parameter(payload: AddParameterRequest) -> EditorResponse:
    """Append a parameter slot to a custom contract call block."""
    return _apply("add_parameter", lambda: editor.add_parameter_slot(payload.root, payload.path))
