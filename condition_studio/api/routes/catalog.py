"""API routes for the block template catalog."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from condition_studio.api.schemas.blocks import TemplateListResponse
from condition_studio.blocks.catalog import TEMPLATE_CATEGORIES, get_template, list_templates

router = APIRouter(tags=["catalog"])


@router.get("/catalog/templates")
async def list_catalog_templates(
    category: Annotated[
        str | None, Query(description="Only templates of this category (time, rpc, ...)")
    ] = None,
) -> TemplateListResponse:
    """List the block templates the editor can drop onto a slot."""
    return TemplateListResponse(
        templates=[template.to_wire() for template in list_templates(category)],
        categories=list(TEMPLATE_CATEGORIES),
    )


@router.get("/catalog/templates/{template_id}")
async def get_catalog_template(template_id: str) -> dict:
    """Get a single template by id."""
    return get_template(template_id).to_wire()
