"""
Workspace dependencies.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from launchline.core.analytics import AnalyticsClient, get_analytics_client
from launchline.core.database import get_db_session

from .service import WorkspaceService


async def get_workspace_service(
    db: AsyncSession = Depends(get_db_session),
    analytics: AnalyticsClient = Depends(get_analytics_client),
) -> WorkspaceService:
    """Build a request scoped WorkspaceService."""
    return WorkspaceService(db, analytics)
