#app/services/transitions.py
"""
Политика переходов статусов задачи.

Чистая функция от (текущее состояние задачи, запрошенные изменения): считает,
какие поля реально записать (включая производные таймстемпы и флаги) и какие
записи Activity породить. Ничего не читает и не пишет в БД.

Правила (только если запрошенный статус отличается от текущего):
    * -> IN_PROGRESS    started_at = now, только если ещё не задан
    * -> NEEDS_REVIEW   reviewed_at = now, is_active = False
    * -> DONE           completed_at = now
    DONE -> *           completed_at = None
    NEEDS_REVIEW -> *   reviewed_at = None
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.exceptions import TaskValidationError
from app.models.task import TaskStatus, Priority

ACTORS = ("human", "agent")
DEFAULT_ACTOR = "human"

MAX_STORY_POINTS = 100


@dataclass
class ActivityDraft:
    """Activity, которую нужно сохранить вместе с обновлением."""
    type: str
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None


@dataclass
class TransitionPlan:
    """
    Результат политики: что записать в задачу и что залогировать.

    blocked_by is None, если зависимости не трогали; иначе это полный новый набор ID.
    """
    fields: Dict[str, Any]
    actor: str
    old_status: str
    new_status: str
    activities: List[ActivityDraft] = field(default_factory=list)
    blocked_by: Optional[List[str]] = None

    @property
    def status_changed(self) -> bool:
        return self.old_status != self.new_status

    def entered(self, status: TaskStatus) -> bool:
        return self.status_changed and self.new_status == status.value


def normalize_actor(actor: Optional[str]) -> str:
    if actor is None or actor == "":
        return DEFAULT_ACTOR
    value = str(actor).strip().lower()
    if value not in ACTORS:
        raise TaskValidationError(f"Invalid actor '{actor}'. Use one of: {', '.join(ACTORS)}.")
    return value


def parse_status(value: Any) -> str:
    try:
        return TaskStatus(value).value
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise TaskValidationError(f"Invalid status '{value}'. Use one of: {allowed}.")


def parse_priority(value: Any) -> str:
    try:
        return Priority(value).value
    except ValueError:
        allowed = ", ".join(p.value for p in Priority)
        raise TaskValidationError(f"Invalid priority '{value}'. Use one of: {allowed}.")


def normalize_title(value: Any) -> str:
    if value is not None and not isinstance(value, str):
        raise TaskValidationError("Title must be a string.")
    title = (value or "").strip()
    if not title:
        raise TaskValidationError("Title is required.")
    return title


def normalize_tags(tags: Any) -> List[str]:
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise TaskValidationError("Tags must be a list of strings.")
    seen: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def validate_story_points(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TaskValidationError("Story points must be an integer.")
    if not 1 <= value <= MAX_STORY_POINTS:
        raise TaskValidationError(f"Story points must be between 1 and {MAX_STORY_POINTS}.")
    return value


def normalize_blocked_reason(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TaskValidationError("Blocked reason must be a string.")
    value = value.strip()
    return value or None


def normalize_dependencies(task_id: str, blocked_by: Any) -> List[str]:
    if blocked_by is None:
        return []
    if not isinstance(blocked_by, list) or not all(isinstance(i, str) for i in blocked_by):
        raise TaskValidationError("blocked_by must be a list of task ids.")
    ids: List[str] = []
    for dep_id in blocked_by:
        if dep_id == task_id:
            raise TaskValidationError("A task cannot be blocked by itself.")
        if dep_id not in ids:
            ids.append(dep_id)
    return ids


def _is_set(reason: Optional[str]) -> bool:
    return bool(reason and reason.strip())


def plan_update(task: Any, changes: Dict[str, Any], actor: Optional[str] = None, now: Optional[datetime] = None) -> TransitionPlan:
    """
    Считает эффективное обновление задачи.

    task — текущее состояние (ORM-объект или любой объект с теми же атрибутами),
    changes — только реально присланные поля (exclude_unset).
    Бросает TaskValidationError на любых некорректных значениях; в этом случае
    ничего не должно быть записано.
    """
    now = now or datetime.now(timezone.utc)
    actor = normalize_actor(actor)

    if "blocking" in changes:
        raise TaskValidationError("'blocking' is derived from blocked_by and cannot be updated.")

    fields: Dict[str, Any] = {}
    activities: List[ActivityDraft] = []

    if "title" in changes:
        fields["title"] = normalize_title(changes["title"])
    if "description" in changes:
        fields["description"] = changes["description"]
    if "status" in changes:
        if changes["status"] is None:
            raise TaskValidationError("Status cannot be null.")
        fields["status"] = parse_status(changes["status"])
    if "priority" in changes:
        if changes["priority"] is None:
            raise TaskValidationError("Priority cannot be null.")
        fields["priority"] = parse_priority(changes["priority"])
    if "tags" in changes:
        fields["tags"] = normalize_tags(changes["tags"])
    if "position" in changes:
        if not isinstance(changes["position"], int) or isinstance(changes["position"], bool):
            raise TaskValidationError("Position must be an integer.")
        fields["position"] = changes["position"]
    if "is_active" in changes:
        if not isinstance(changes["is_active"], bool):
            raise TaskValidationError("is_active must be a boolean.")
        fields["is_active"] = changes["is_active"]
    if "story_points" in changes:
        fields["story_points"] = validate_story_points(changes["story_points"])
    if "blocked_reason" in changes:
        fields["blocked_reason"] = normalize_blocked_reason(changes["blocked_reason"])

    blocked_by = None
    if "blocked_by" in changes:
        blocked_by = normalize_dependencies(task.id, changes["blocked_by"])

    old_status = task.status
    new_status = fields.pop("status", old_status)

    if new_status != old_status:
        fields["status"] = new_status
        activities.append(ActivityDraft("status_change", "status", old_status, new_status))

        if new_status == TaskStatus.IN_PROGRESS.value and task.started_at is None:
            fields["started_at"] = now
        if new_status == TaskStatus.NEEDS_REVIEW.value:
            fields["reviewed_at"] = now
            fields["is_active"] = False
        if new_status == TaskStatus.DONE.value:
            fields["completed_at"] = now
        if old_status == TaskStatus.DONE.value:
            fields["completed_at"] = None
        if old_status == TaskStatus.NEEDS_REVIEW.value:
            fields["reviewed_at"] = None

    if "is_active" in fields and fields["is_active"] != bool(task.is_active):
        activities.append(ActivityDraft(
            "started_work" if fields["is_active"] else "stopped_work",
            "is_active", str(bool(task.is_active)).lower(), str(fields["is_active"]).lower(),
        ))

    if "blocked_reason" in fields:
        was_blocked = _is_set(task.blocked_reason)
        now_blocked = _is_set(fields["blocked_reason"])
        if now_blocked and not was_blocked:
            activities.append(ActivityDraft("blocked", "blocked_reason", None, fields["blocked_reason"]))
        elif was_blocked and not now_blocked:
            activities.append(ActivityDraft("unblocked", "blocked_reason", task.blocked_reason, None))

    for audited in ("title", "priority"):
        if audited in fields and fields[audited] != getattr(task, audited):
            activities.append(ActivityDraft("field_update", audited, getattr(task, audited), fields[audited]))

    fields["updated_at"] = now
    fields["version"] = (task.version or 0) + 1

    return TransitionPlan(
        fields=fields,
        actor=actor,
        old_status=old_status,
        new_status=new_status,
        activities=activities,
        blocked_by=blocked_by,
    )
