"""
Pydantic schemas for API request/response validation.

This package contains schema definitions for the catalog, block editor and
condition compiler endpoints.
"""

# Re-export schemas for convenient imports.
from .blocks import AddParameterRequest as AddParameterRequest
from .blocks import AttachRequest as AttachRequest
from .blocks import DetachRequest as DetachRequest
from .blocks import EditorResponse as EditorResponse
from .blocks import SetComparatorRequest as SetComparatorRequest
from .blocks import SetValueRequest as SetValueRequest
from .blocks import TemplateListResponse as TemplateListResponse
from .conditions import CompileRequest as CompileRequest
from .conditions import CompileResponse as CompileResponse
from .conditions import ValidateRequest as ValidateRequest
from .conditions import ValidateResponse as ValidateResponse
