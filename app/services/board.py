#app/services/board.py
"""
Мутации доски целиком: запись в БД -> broadcast -> post-commit хуки.

API-хендлеры ходят сюда, а не напрямую в crud, когда изменение должно
долететь до открытых досок.
"""
import logging
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.crud import task as crud_task
from app.models.task import Task, TaskStatus
from app.schemas.task import TaskRead
from app.services.archive_policy import enforce_done_column_limit
from app.services.broadcast import BroadcastHub, TASK_CREATED, TASK_UPDATED, TASK_DELETED
from app.services.transitions import TransitionPlan

logger = logging.getLogger("OCB.Board")

# Хуки после коммита перехода: статус -> список функций (db) -> задачи, которые они изменили
POST_COMMIT_HOOKS: Dict[TaskStatus, List[Callable[[Session], List[Task]]]] = {
    TaskStatus.DONE: [enforce_done_column_limit],
}


def serialize_task(task: Task) -> dict:
    return TaskRead.model_validate(task).model_dump(mode="json")


def run_post_commit_hooks(db: Session, plan: TransitionPlan) -> List[Task]:
    touched: List[Task] = []
    for status, hooks in POST_COMMIT_HOOKS.items():
        if plan.entered(status):
            for hook in hooks:
                touched.extend(hook(db))
    return touched


async def create_task(db: Session, hub: BroadcastHub, data: dict, actor: Optional[str] = None) -> Task:
    task = crud_task.create_task(db, data, actor=actor)
    await hub.publish(TASK_CREATED, serialize_task(task))
    return task


async def update_task(db: Session, hub: BroadcastHub, task_id: str, data: dict, actor: Optional[str] = None) -> Task:
    """
    PATCH задачи: политика переходов, коммит, событие, затем авто-архив.
    Изменение уже закоммичено до хуков, поэтому task:updated уходит сразу;
    каждая авто-архивированная задача получает своё task:updated.
    """
    task = crud_task.get_task(db, task_id)
    plan = crud_task.apply_task_update(db, task, data, actor=actor)
    await hub.publish(TASK_UPDATED, serialize_task(task))

    for other in run_post_commit_hooks(db, plan):
        await hub.publish(TASK_UPDATED, serialize_task(other))
    return task


async def delete_task(db: Session, hub: BroadcastHub, task_id: str) -> str:
    deleted_id = crud_task.delete_task(db, task_id)
    await hub.publish(TASK_DELETED, {"id": deleted_id})
    return deleted_id


async def archive_task(db: Session, hub: BroadcastHub, task_id: str) -> Task:
    task = crud_task.archive_task(db, task_id)
    await hub.publish(TASK_UPDATED, serialize_task(task))
    return task


async def unarchive_task(db: Session, hub: BroadcastHub, task_id: str) -> Task:
    task = crud_task.unarchive_task(db, task_id)
    await hub.publish(TASK_UPDATED, serialize_task(task))
    return task


async def publish_task_changed(db: Session, hub: BroadcastHub, task_id: str) -> Task:
    """
    После изменения дочерних сущностей (комментарии, сабтаски, вложения)
    рассылает задачу целиком.
    """
    task = crud_task.get_task(db, task_id)
    db.refresh(task)
    await hub.publish(TASK_UPDATED, serialize_task(task))
    return task
