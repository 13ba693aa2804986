#app/schemas/metrics.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

class BoardMetrics(BaseModel):
    """
    BoardMetrics — сводные метрики доски (счётчики, cycle/lead time, velocity).
    """
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    review_tasks: int
    todo_tasks: int
    total_points: int
    completed_points: int
    avg_cycle_time_hours: Optional[float] = Field(None, description="created -> completed, часы")
    avg_lead_time_hours: Optional[float] = Field(None, description="started -> completed, часы")
    velocity_last_7_days: int
    velocity_last_30_days: int

class TaskTiming(BaseModel):
    """
    TaskTiming — время задачи в каждом статусе (секунды).
    """
    task_id: str
    task_number: int
    title: str
    story_points: Optional[int] = None
    total_cycle_time: Optional[int] = None
    time_in_todo: int = 0
    time_in_progress: int = 0
    time_in_review: int = 0
    completed_at: Optional[datetime] = None

class VelocityPoint(BaseModel):
    period: str
    tasks_completed: int
    points_completed: int

class DetailedBoardMetrics(BoardMetrics):
    task_metrics: List[TaskTiming] = Field(default_factory=list)
    velocity: List[VelocityPoint] = Field(default_factory=list)
    period_days: int
