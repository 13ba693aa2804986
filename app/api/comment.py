#app/api/comment.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.schemas.comment import CommentCreate, CommentRead
from app.schemas.response import SuccessResponse, ERROR_RESPONSES
from app.crud.comment import get_comments, create_comment, delete_comment
from app.services import board
from app.services.broadcast import BroadcastHub
from app.dependencies import get_db, get_hub
from app.core.exceptions import (
    TaskNotFound,
    CommentNotFound,
    CommentValidationError,
    StoreError,
)

logger = logging.getLogger("OCB.CommentsAPI")

router = APIRouter(prefix="/tasks/{task_id}/comments", tags=["Comments"], responses=ERROR_RESPONSES)

@router.get("/", response_model=List[CommentRead])
def list_comments(task_id: str, db: Session = Depends(get_db)):
    try:
        return get_comments(db, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

@router.post("/", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment(
    task_id: str,
    data: CommentCreate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Добавить комментарий. Доска получает task:updated с задачей целиком.
    """
    try:
        comment = create_comment(db, task_id, data.model_dump())
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except CommentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return comment

@router.delete("/{comment_id}", response_model=SuccessResponse)
async def remove_comment(
    task_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    try:
        deleted_id = delete_comment(db, task_id, comment_id)
    except CommentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return SuccessResponse(result=deleted_id, detail="Comment deleted")
