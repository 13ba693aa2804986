#app/services/metrics.py
"""
Метрики доски: счётчики по колонкам, story points, cycle/lead time, velocity.

Счётчики считаются по неархивным задачам. Cycle time, lead time и velocity —
по всем задачам, завершённым за последние `days` дней, включая архивные.
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.task import Task, TaskStatus, as_utc

logger = logging.getLogger("OCB.Metrics")

DETAILED_TASK_LIMIT = 20


def _avg_hours(durations: List[float]) -> Optional[float]:
    if not durations:
        return None
    return round(sum(durations) / len(durations) / 3600, 1)


def _points(tasks: List[Task]) -> int:
    return sum(t.story_points or 0 for t in tasks)


def _time_in_status(task: Task) -> Dict[str, int]:
    spent: Dict[str, int] = defaultdict(int)
    for entry in task.status_history:
        spent[entry.status] += entry.duration or 0
    return spent


def compute_metrics(db: Session, days: int = 30, detailed: bool = False, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=days)
    week_ago = now - timedelta(days=7)

    board = db.query(Task).filter(Task.archived == False).all()
    completed = (
        db.query(Task)
        .options(selectinload(Task.status_history))
        .filter(Task.status == TaskStatus.DONE.value, Task.completed_at >= since)
        .order_by(Task.completed_at.desc())
        .all()
    )
    completed_last_week = [t for t in completed if as_utc(t.completed_at) >= week_ago]

    def by_status(status: TaskStatus) -> List[Task]:
        return [t for t in board if t.status == status.value]

    cycle_times = [
        (as_utc(t.completed_at) - as_utc(t.created_at)).total_seconds()
        for t in completed if t.completed_at and t.created_at
    ]
    lead_times = [
        (as_utc(t.completed_at) - as_utc(t.started_at)).total_seconds()
        for t in completed if t.completed_at and t.started_at
    ]

    metrics = {
        "total_tasks": len(board),
        "completed_tasks": len(by_status(TaskStatus.DONE)),
        "in_progress_tasks": len(by_status(TaskStatus.IN_PROGRESS)),
        "review_tasks": len(by_status(TaskStatus.NEEDS_REVIEW)),
        "todo_tasks": len(by_status(TaskStatus.TODO)),
        "total_points": _points(board),
        "completed_points": _points(by_status(TaskStatus.DONE)),
        "avg_cycle_time_hours": _avg_hours(cycle_times),
        "avg_lead_time_hours": _avg_hours(lead_times),
        "velocity_last_7_days": _points(completed_last_week),
        "velocity_last_30_days": _points(completed),
    }
    if not detailed:
        return metrics

    task_metrics = []
    for task in completed[:DETAILED_TASK_LIMIT]:
        spent = _time_in_status(task)
        task_metrics.append({
            "task_id": task.id,
            "task_number": task.task_number,
            "title": task.title,
            "story_points": task.story_points,
            "total_cycle_time": int((as_utc(task.completed_at) - as_utc(task.created_at)).total_seconds()),
            "time_in_todo": spent[TaskStatus.TODO.value],
            "time_in_progress": spent[TaskStatus.IN_PROGRESS.value],
            "time_in_review": spent[TaskStatus.NEEDS_REVIEW.value],
            "completed_at": task.completed_at,
        })

    per_day: Dict[str, Dict[str, int]] = defaultdict(lambda: {"tasks": 0, "points": 0})
    for task in completed:
        day = as_utc(task.completed_at).date().isoformat()
        per_day[day]["tasks"] += 1
        per_day[day]["points"] += task.story_points or 0
    velocity = [
        {"period": day, "tasks_completed": v["tasks"], "points_completed": v["points"]}
        for day, v in sorted(per_day.items(), reverse=True)
    ]

    logger.debug(f"Computed detailed metrics over {days} days: {len(completed)} completed tasks")
    return {**metrics, "task_metrics": task_metrics, "velocity": velocity, "period_days": days}
