#app/api/task.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.schemas.response import SuccessResponse, ERROR_RESPONSES
from app.crud.task import get_task, get_all_tasks
from app.services import board
from app.services.broadcast import BroadcastHub
from app.dependencies import get_db, get_hub
from app.core.exceptions import (
    TaskNotFound,
    TaskValidationError,
    VersionConflict,
    StoreError,
)

logger = logging.getLogger("OCB.TasksAPI")

router = APIRouter(prefix="/tasks", tags=["Tasks"], responses=ERROR_RESPONSES)

@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_new_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Создать новую задачу (всегда в TODO).
    """
    try:
        return await board.create_task(db, hub, data.model_dump(exclude={"actor"}), actor=data.actor)
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.get("/", response_model=List[TaskRead])
def list_tasks(
    task_status: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    task_number: Optional[int] = Query(None, ge=1),
    is_active: Optional[bool] = Query(None),
    archived: bool = Query(False),
    include_archived: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Получить список задач с фильтрацией и поиском. Архивные скрыты по умолчанию.
    """
    filters = {
        "status": task_status,
        "priority": priority,
        "tag": tag,
        "search": search,
        "task_number": task_number,
        "is_active": is_active,
        "archived": archived,
        "include_archived": include_archived,
    }
    filters = {k: v for k, v in filters.items() if v is not None}
    try:
        return get_all_tasks(db, filters=filters)
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/{task_id}", response_model=TaskRead)
def get_one_task(task_id: str, db: Session = Depends(get_db)):
    """
    Получить задачу по ID.
    """
    try:
        return get_task(db, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

@router.patch("/{task_id}", response_model=TaskRead, responses={409: ERROR_RESPONSES[400]})
async def update_one_task(
    task_id: str,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Частичное обновление задачи. Смена статуса проставляет/сбрасывает таймстемпы,
    переход в DONE может отправить старые завершённые задачи в архив.
    """
    try:
        return await board.update_task(db, hub, task_id, data.model_dump(exclude_unset=True), actor=data.actor)
    except TaskNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except VersionConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreError as e:
        logger.error(f"Store error updating task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_one_task(
    task_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Удалить задачу вместе со всеми дочерними записями.
    """
    try:
        deleted_id = await board.delete_task(db, hub, task_id)
        return SuccessResponse(result=deleted_id, detail="Task deleted")
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{task_id}/archive", response_model=TaskRead)
async def archive_one_task(
    task_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Убрать задачу с доски в архив.
    """
    try:
        return await board.archive_task(db, hub, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{task_id}/unarchive", response_model=TaskRead)
async def unarchive_one_task(
    task_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Вернуть архивную задачу на доску.
    """
    try:
        return await board.unarchive_task(db, hub, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except TaskValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
