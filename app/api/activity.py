#app/api/activity.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.schemas.activity import ActivityRead
from app.schemas.response import ERROR_RESPONSES
from app.crud.activity import get_activities, DEFAULT_FEED_SIZE
from app.dependencies import get_db
from app.core.exceptions import TaskValidationError

router = APIRouter(prefix="/activities", tags=["Activity"], responses=ERROR_RESPONSES)

@router.get("/", response_model=List[ActivityRead])
def activity_feed(
    limit: int = Query(DEFAULT_FEED_SIZE, ge=1),
    actor: Optional[str] = Query(None, description="human или agent"),
    task_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """
    Лента активности, новые записи сверху. limit обрезается до ACTIVITY_FEED_MAX.
    """
    try:
        return get_activities(db, limit=limit, actor=actor, task_id=task_id)
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
