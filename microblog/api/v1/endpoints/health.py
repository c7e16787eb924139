from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microblog.core.database import get_db

router = APIRouter()

@router.get("/")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint"""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"

    return ORJSONResponse({
        "status": "ok",
        "database": db_status,
        "service": "Microblog ActivityPub Server"
    }, headers={"Cache-Control": "public, max-age=5"})
