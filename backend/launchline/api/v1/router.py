"""
API v1 router registry.
"""
from fastapi import APIRouter

from .health import router as health_router
from .invitations import router as invitations_router
from .workspace import router as workspace_router

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(workspace_router)
v1_router.include_router(invitations_router)
v1_router.include_router(health_router)
