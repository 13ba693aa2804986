#app/api/subtask.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.schemas.subtask import SubtaskCreate, SubtaskUpdate, SubtaskRead
from app.schemas.response import SuccessResponse, ERROR_RESPONSES
from app.crud.subtask import get_subtasks, create_subtask, update_subtask, delete_subtask
from app.services import board
from app.services.broadcast import BroadcastHub
from app.dependencies import get_db, get_hub
from app.core.exceptions import (
    TaskNotFound,
    SubtaskNotFound,
    SubtaskValidationError,
    StoreError,
)

logger = logging.getLogger("OCB.SubtasksAPI")

router = APIRouter(prefix="/tasks/{task_id}/subtasks", tags=["Subtasks"], responses=ERROR_RESPONSES)

@router.get("/", response_model=List[SubtaskRead])
def list_subtasks(task_id: str, db: Session = Depends(get_db)):
    """
    Чеклист задачи по позиции.
    """
    try:
        return get_subtasks(db, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

@router.post("/", response_model=SubtaskRead, status_code=status.HTTP_201_CREATED)
async def add_subtask(
    task_id: str,
    data: SubtaskCreate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    try:
        subtask = create_subtask(db, task_id, data.model_dump())
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except SubtaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return subtask

@router.patch("/{subtask_id}", response_model=SubtaskRead)
async def edit_subtask(
    task_id: str,
    subtask_id: str,
    data: SubtaskUpdate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Переименовать, отметить выполненным или переставить сабтаск.
    """
    try:
        subtask = update_subtask(db, task_id, subtask_id, data.model_dump(exclude_unset=True))
    except SubtaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubtaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return subtask

@router.delete("/{subtask_id}", response_model=SuccessResponse)
async def remove_subtask(
    task_id: str,
    subtask_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    try:
        deleted_id = delete_subtask(db, task_id, subtask_id)
    except SubtaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return SuccessResponse(result=deleted_id, detail="Subtask deleted")
