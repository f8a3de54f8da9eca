from fastapi import APIRouter, Depends

from schooldesk.core.config import settings
from schooldesk.core.database import Database
from schooldesk.core.dependencies import get_database

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(database: Database = Depends(get_database)):
    return {
        "success": True,
        "status": "ok" if database.is_connected else "degraded",
        "database": "connected" if database.is_connected else "disconnected",
        "version": settings.VERSION
    }
