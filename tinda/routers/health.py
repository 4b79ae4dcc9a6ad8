from fastapi import APIRouter

from tinda.core.config import get_settings

router = APIRouter(tags=["health"])

settings = get_settings()


@router.get("/health")
def health_check():
    return {"status": "healthy", "app": settings.app_name, "environment": settings.app_env}
