"""
Blog API Backend — Statistics Route
====================================

What:  GET /statistics → row totals for posts, users and comments.
How:   Three COUNT(*) queries; cheap enough to run per request, so nothing
       is cached.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.database import get_db_session
from blogapi.schemas.envelope import ok
from blogapi.services.query_service import query_service

router = APIRouter(tags=["Statistics"])


@router.get("/statistics", summary="Totals of posts, users and comments")
async def get_statistics(db: AsyncSession = Depends(get_db_session)) -> JSONResponse:
    return ok(await query_service.get_statistics(db))
