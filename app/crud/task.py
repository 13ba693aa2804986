#app/crud/task.py
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import case, func
from app.models.task import Task, TaskCounter, TaskStatus, TaskOrigin, as_utc
from app.models.activity import Activity
from app.models.status_history import StatusHistory
from app.core.settings import settings
from app.core.exceptions import (
    TaskNotFound,
    TaskValidationError,
    StoreError,
    VersionConflict,
)
from app.services.transitions import (
    TransitionPlan,
    plan_update,
    normalize_actor,
    normalize_title,
    normalize_tags,
    parse_priority,
    parse_status,
    validate_story_points,
)
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger("OCB.Tasks")

def commit_or_raise(db: Session, action: str) -> None:
    """
    Коммит с откатом и StoreError при любой ошибке хранилища.
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise StoreError(f"Database error while trying to {action}.")

def next_task_number(db: Session) -> int:
    """
    Выдаёт следующий номер задачи. Счётчик хранится отдельно, поэтому номера
    удалённых задач не переиспользуются.
    """
    counter = db.query(TaskCounter).filter(TaskCounter.id == 1).with_for_update().first()
    if counter is None:
        current = db.query(func.max(Task.task_number)).scalar() or 0
        counter = TaskCounter(id=1, last_number=current)
        db.add(counter)
    counter.last_number += 1
    db.flush()
    return counter.last_number

def create_task(db: Session, data: dict, actor: Optional[str] = None) -> Task:
    """
    Создать новую задачу в колонке TODO (в конец колонки).
    """
    title = normalize_title(data.get("title"))
    priority = parse_priority(data.get("priority") or "MEDIUM")
    tags = normalize_tags(data.get("tags"))
    story_points = validate_story_points(data.get("story_points"))
    actor = normalize_actor(actor or data.get("actor"))
    try:
        origin = TaskOrigin(data.get("origin") or TaskOrigin.HUMAN).value
    except ValueError:
        raise TaskValidationError(f"Invalid origin '{data.get('origin')}'. Use HUMAN or AI.")

    max_position = (
        db.query(func.max(Task.position))
        .filter(Task.status == TaskStatus.TODO.value)
        .scalar()
    )
    now = datetime.now(timezone.utc)

    task = Task(
        task_number=next_task_number(db),
        title=title,
        description=data.get("description"),
        status=TaskStatus.TODO.value,
        priority=priority,
        tags=tags,
        position=(max_position if max_position is not None else -1) + 1,
        is_active=False,
        story_points=story_points,
        origin=origin,
        archived=False,
        created_at=now,
        updated_at=now,
        version=1,
    )
    task.activities.append(Activity(type="created", actor=actor, created_at=now))
    task.status_history.append(StatusHistory(status=TaskStatus.TODO.value, entered_at=now))
    db.add(task)
    commit_or_raise(db, "create task")
    db.refresh(task)
    logger.info(f"Created task {task.id} (#{task.task_number}) by {actor}")
    return task

def get_task(db: Session, task_id: str) -> Task:
    """
    Получить задачу по ID (архивные тоже).
    """
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise TaskNotFound(f"Task {task_id} not found.")
    return task

def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

# Порядок колонок доски
STATUS_ORDER = {
    TaskStatus.TODO.value: 0,
    TaskStatus.IN_PROGRESS.value: 1,
    TaskStatus.NEEDS_REVIEW.value: 2,
    TaskStatus.DONE.value: 3,
}

def get_all_tasks(db: Session, filters: dict = None) -> List[Task]:
    """
    Список задач с фильтрами. По умолчанию архивные скрыты.
    Порядок: колонка доски, затем position и номер задачи.
    """
    query = db.query(Task)
    filters = filters or {}

    if not filters.get("include_archived", False):
        query = query.filter(Task.archived == bool(filters.get("archived", False)))

    if filters.get("status") and filters["status"] != "ALL":
        query = query.filter(Task.status == parse_status(filters["status"]))
    if filters.get("priority") and filters["priority"] != "ALL":
        query = query.filter(Task.priority == parse_priority(filters["priority"]))
    if filters.get("search"):
        val = f"%{_escape_like(filters['search'])}%"
        query = query.filter(Task.title.ilike(val, escape="\\") | Task.description.ilike(val, escape="\\"))
    if filters.get("task_number") is not None:
        query = query.filter(Task.task_number == filters["task_number"])
    if filters.get("is_active") is not None:
        query = query.filter(Task.is_active == filters["is_active"])

    tasks = query.order_by(
        case(STATUS_ORDER, value=Task.status, else_=len(STATUS_ORDER)),
        Task.position.asc(),
        Task.task_number.asc(),
    ).all()

    # tags хранятся JSON-списком: точное членство проверяем после выборки
    tag = filters.get("tag")
    if tag and tag != "ALL":
        tasks = [t for t in tasks if tag in (t.tags or [])]
    return tasks

def _close_status_history(task: Task, now: datetime) -> None:
    for entry in task.status_history:
        if entry.exited_at is None:
            entry.exited_at = now
            entry.duration = max(0, int((now - as_utc(entry.entered_at)).total_seconds()))

def apply_task_update(
    db: Session, task: Task, data: dict, actor: Optional[str] = None, now: Optional[datetime] = None
) -> TransitionPlan:
    """
    Прогоняет запрос через политику переходов и сохраняет результат одним коммитом.
    Возвращает план, чтобы вызывающий мог запустить post-commit хуки.
    """
    changes = dict(data)
    changes.pop("actor", None)
    expected_version = changes.pop("expected_version", None)
    if expected_version is not None and expected_version != task.version:
        raise VersionConflict(
            f"Task {task.id} is at version {task.version}, expected {expected_version}."
        )

    plan = plan_update(task, changes, actor=actor, now=now)
    now = plan.fields["updated_at"]

    dependencies = None
    if plan.blocked_by is not None:
        found = db.query(Task).filter(Task.id.in_(plan.blocked_by)).all() if plan.blocked_by else []
        by_id = {t.id: t for t in found}
        missing = [dep_id for dep_id in plan.blocked_by if dep_id not in by_id]
        if missing:
            raise TaskNotFound(f"Blocking task(s) not found: {', '.join(missing)}.")
        dependencies = [by_id[dep_id] for dep_id in plan.blocked_by]

    for field, value in plan.fields.items():
        setattr(task, field, value)
    if dependencies is not None:
        task.blocked_by = dependencies
    for draft in plan.activities:
        task.activities.append(Activity(
            type=draft.type,
            actor=plan.actor,
            field=draft.field,
            old_value=draft.old_value,
            new_value=draft.new_value,
            created_at=now,
        ))
    if plan.status_changed:
        _close_status_history(task, now)
        task.status_history.append(StatusHistory(status=plan.new_status, entered_at=now))

    commit_or_raise(db, f"update task {task.id}")
    db.refresh(task)
    changed = sorted(k for k in plan.fields if k not in ("updated_at", "version"))
    if changed:
        logger.info(f"Updated task {task.id} fields {changed} ({plan.old_status} -> {plan.new_status}) by {plan.actor}")
    else:
        logger.info(f"Update called but no changes for task {task.id}")
    return plan

def update_task(db: Session, task_id: str, data: dict, actor: Optional[str] = None) -> Task:
    """
    Обновить задачу по ID через политику переходов.
    """
    task = get_task(db, task_id)
    apply_task_update(db, task, data, actor=actor)
    return task

def delete_task(db: Session, task_id: str) -> str:
    """
    Удаляет задачу вместе с комментариями, сабтасками, вложениями и историей.
    """
    task = get_task(db, task_id)
    db.delete(task)
    commit_or_raise(db, f"delete task {task_id}")
    logger.info(f"Deleted task {task_id}")
    return task_id

def mark_archived(db: Session, task: Task, now: Optional[datetime] = None) -> Task:
    now = now or datetime.now(timezone.utc)
    task.archived = True
    task.archived_at = now
    task.updated_at = now
    task.version = (task.version or 0) + 1
    commit_or_raise(db, f"archive task {task.id}")
    db.refresh(task)
    logger.info(f"Archived task {task.id} (#{task.task_number})")
    return task

def archive_task(db: Session, task_id: str) -> Task:
    """
    Явная архивация задачи (скрыть с доски).
    """
    task = get_task(db, task_id)
    if task.archived:
        raise TaskValidationError("Task already archived.")
    return mark_archived(db, task)

def unarchive_task(db: Session, task_id: str, done_limit: Optional[int] = None) -> Task:
    """
    Возвращает архивную задачу на доску.
    DONE-задачу вернуть нельзя, пока колонка Done заполнена до лимита.
    """
    task = get_task(db, task_id)
    if not task.archived:
        raise TaskValidationError(f"Task {task_id} is not archived.")
    if task.status == TaskStatus.DONE.value:
        limit = settings.DONE_COLUMN_LIMIT if done_limit is None else done_limit
        visible = (
            db.query(func.count(Task.id))
            .filter(Task.status == TaskStatus.DONE.value, Task.archived == False)
            .scalar()
        )
        if visible >= limit:
            raise TaskValidationError(
                f"Done column is full ({visible}/{limit}); cannot restore a completed task."
            )
    now = datetime.now(timezone.utc)
    task.archived = False
    task.archived_at = None
    task.updated_at = now
    task.version = (task.version or 0) + 1
    commit_or_raise(db, f"unarchive task {task_id}")
    db.refresh(task)
    logger.info(f"Restored task {task_id} from archive")
    return task

def get_archive(db: Session, filters: dict = None) -> Dict[str, Any]:
    """
    Архивные задачи (новые сверху) и статистика по всему архиву.
    """
    filters = dict(filters or {})
    filters["archived"] = True
    filters.pop("include_archived", None)
    tasks = get_all_tasks(db, filters)
    tasks.sort(key=lambda t: as_utc(t.archived_at) or datetime.min.replace(tzinfo=timezone.utc), reverse=True)

    total_archived, total_points = (
        db.query(func.count(Task.id), func.coalesce(func.sum(Task.story_points), 0))
        .filter(Task.archived == True)
        .one()
    )
    return {
        "tasks": tasks,
        "stats": {"total_archived": total_archived, "total_points": int(total_points or 0)},
    }
