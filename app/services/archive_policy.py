#app/services/archive_policy.py
"""
Авто-архивация колонки Done.

На доске одновременно видно не больше DONE_COLUMN_LIMIT завершённых задач.
Запускается как post-commit хук после перехода задачи в DONE: самые давно
завершённые уходят в архив, каждая отдельным коммитом.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.settings import settings
from app.crud.task import mark_archived
from app.models.task import Task, TaskStatus

logger = logging.getLogger("OCB.Archive")


def visible_done_tasks(db: Session) -> List[Task]:
    """Неархивные DONE-задачи, от самой старой завершённой к самой новой."""
    return (
        db.query(Task)
        .filter(Task.status == TaskStatus.DONE.value, Task.archived == False)
        .order_by(Task.completed_at.asc(), Task.task_number.asc())
        .all()
    )


def enforce_done_column_limit(db: Session, limit: Optional[int] = None, now: Optional[datetime] = None) -> List[Task]:
    """
    Архивирует лишние DONE-задачи и возвращает их (для broadcast).
    """
    limit = settings.DONE_COLUMN_LIMIT if limit is None else limit
    done = visible_done_tasks(db)
    excess = len(done) - limit
    if excess <= 0:
        return []

    archived = []
    for task in done[:excess]:
        archived.append(mark_archived(db, task, now=now))
    logger.info(f"Done column over limit ({len(done)} > {limit}), archived {[t.task_number for t in archived]}")
    return archived
