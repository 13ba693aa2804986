#app/crud/subtask.py
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.subtask import Subtask
from app.core.exceptions import SubtaskNotFound, SubtaskValidationError
from app.crud.task import get_task, commit_or_raise
import logging
from typing import List

logger = logging.getLogger("OCB.Subtasks")

def get_subtasks(db: Session, task_id: str) -> List[Subtask]:
    get_task(db, task_id)
    return db.query(Subtask).filter(Subtask.task_id == task_id).order_by(Subtask.position.asc()).all()

def get_subtask(db: Session, task_id: str, subtask_id: str) -> Subtask:
    subtask = (
        db.query(Subtask)
        .filter(Subtask.id == subtask_id, Subtask.task_id == task_id)
        .first()
    )
    if not subtask:
        raise SubtaskNotFound(f"Subtask {subtask_id} not found on task {task_id}.")
    return subtask

def create_subtask(db: Session, task_id: str, data: dict) -> Subtask:
    """
    Добавляет пункт чеклиста. Без позиции — в конец.
    """
    task = get_task(db, task_id)
    title = (data.get("title") or "").strip()
    if not title:
        raise SubtaskValidationError("Subtask title is required.")

    position = data.get("position")
    if position is None:
        max_position = db.query(func.max(Subtask.position)).filter(Subtask.task_id == task_id).scalar()
        position = (max_position if max_position is not None else -1) + 1

    subtask = Subtask(title=title, completed=False, position=position)
    task.subtasks.append(subtask)
    commit_or_raise(db, f"add subtask to task {task_id}")
    db.refresh(subtask)
    logger.info(f"Added subtask {subtask.id} to task {task_id}")
    return subtask

def update_subtask(db: Session, task_id: str, subtask_id: str, data: dict) -> Subtask:
    """
    Обновить сабтаск (название, отметка, позиция).
    """
    subtask = get_subtask(db, task_id, subtask_id)
    if "title" in data:
        title = (data["title"] or "").strip()
        if not title:
            raise SubtaskValidationError("Subtask title is required.")
        subtask.title = title
    if data.get("completed") is not None:
        subtask.completed = bool(data["completed"])
    if data.get("position") is not None:
        subtask.position = data["position"]
    commit_or_raise(db, f"update subtask {subtask_id}")
    db.refresh(subtask)
    logger.info(f"Updated subtask {subtask_id} on task {task_id}")
    return subtask

def delete_subtask(db: Session, task_id: str, subtask_id: str) -> str:
    subtask = get_subtask(db, task_id, subtask_id)
    db.delete(subtask)
    commit_or_raise(db, f"delete subtask {subtask_id}")
    logger.info(f"Deleted subtask {subtask_id} from task {task_id}")
    return subtask_id
