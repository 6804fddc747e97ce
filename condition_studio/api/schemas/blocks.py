"""Pydantic schemas for catalog and block editor API requests/responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from condition_studio.blocks.models import Block
from condition_studio.core.config import settings
from condition_studio.core.validators import (
    validate_block_tree_depth,
    validate_block_tree_node_count,
)


def check_block_tree_limits(v: Any) -> Any:
    """Reject raw block trees beyond the configured depth and size limits."""
    roots = v if isinstance(v, list) else [v]
    for root in roots:
        if isinstance(root, dict):
            validate_block_tree_depth(root, max_depth=settings.block_tree_max_depth)
    validate_block_tree_node_count(v, max_nodes=settings.block_tree_max_nodes)
    return v


class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Catalog Schemas
# =============================================================================


class TemplateListResponse(BaseModel):
    """Catalog templates, in catalog order."""

    templates: list[dict[str, Any]]
    categories: list[str]


# =============================================================================
# Editor Schemas
# =============================================================================


class BlockEditRequest(_RequestModel):
    """Common part of every editor request: the tree and the owner path."""

    root: Block
    path: list[str] = Field(
        default_factory=list,
        description="Input ids leading from the root to the block owning the slot",
    )

    @field_validator("root", mode="before")
    @classmethod
    def validate_root(cls, v: Any) -> Any:
        return check_block_tree_limits(v)


class AttachRequest(BlockEditRequest):
    """Drop a catalog template, or an inline template block, onto a slot."""

    slot_id: str = Field(min_length=1)
    template_id: str | None = None
    template: Block | None = None

    @field_validator("template", mode="before")
    @classmethod
    def validate_template(cls, v: Any) -> Any:
        return check_block_tree_limits(v) if v is not None else v

    @model_validator(mode="after")
    def validate_template_source(self) -> AttachRequest:
        if (self.template_id is None) == (self.template is None):
            raise ValueError("Exactly one of templateId or template must be provided")
        return self


class DetachRequest(BlockEditRequest):
    slot_id: str = Field(min_length=1)


class SetValueRequest(BlockEditRequest):
    slot_id: str = Field(min_length=1)
    value: str | int | float


class SetComparatorRequest(BlockEditRequest):
    slot_id: str = Field(min_length=1)
    comparator: str


class AddParameterRequest(BlockEditRequest):
    pass


class EditorResponse(BaseModel):
    """
    Result of an editor operation.

    `condition` is the document re-derived from the new tree (None when the
    tree compiles to nothing). `error` carries the compile error message, for
    example an invalid chain id, while the edit itself still succeeded.
    """

    root: dict[str, Any]
    condition: dict[str, Any] | None = None
    error: str | None = None
