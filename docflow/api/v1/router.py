"""API v1 router aggregation."""

from fastapi import APIRouter

from docflow.api.v1.ai import router as ai_router
from docflow.api.v1.auth import router as auth_router
from docflow.api.v1.documents import router as documents_router
from docflow.api.v1.templates import router as templates_router
from docflow.api.v1.users import router as users_router

api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(templates_router, prefix="/templates", tags=["Templates"])
api_router.include_router(documents_router, prefix="/documents", tags=["Documents"])
api_router.include_router(ai_router, prefix="/ai", tags=["AI"])
