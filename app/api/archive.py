#app/api/archive.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.schemas.archive import ArchiveResponse
from app.schemas.response import ERROR_RESPONSES
from app.crud.task import get_archive
from app.dependencies import get_db
from app.core.exceptions import TaskValidationError

router = APIRouter(prefix="/archive", tags=["Archive"], responses=ERROR_RESPONSES)

@router.get("/", response_model=ArchiveResponse)
def list_archive(
    search: Optional[str] = Query(None),
    priority: Optional[str] = Query(None, description="LOW/MEDIUM/HIGH/CRITICAL или ALL"),
    tag: Optional[str] = Query(None, description="Тег или ALL"),
    db: Session = Depends(get_db),
):
    """
    Архив: задачи (последние архивированные сверху) и статистика по всему архиву.
    """
    filters = {"search": search, "priority": priority, "tag": tag}
    try:
        return get_archive(db, {k: v for k, v in filters.items() if v})
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
