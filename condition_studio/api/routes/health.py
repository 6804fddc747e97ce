from fastapi import APIRouter

from condition_studio.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    """Basic health check endpoint."""
    return {"ok": True, "app": settings.app_name, "strict": settings.compiler_strict_mode}
