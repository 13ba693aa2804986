#app/schemas/task.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.models.task import TaskStatus, Priority, TaskOrigin
from app.schemas.comment import CommentRead
from app.schemas.subtask import SubtaskRead
from app.schemas.attachment import AttachmentRead

Actor = Optional[str]

class TaskBase(BaseModel):
    """
    TaskBase — базовая схема задачи (используется для create/read).
    """
    title: str = Field(..., examples=["Wire up the metrics panel"], description="Название задачи")
    description: Optional[str] = Field(None, description="Описание задачи")
    priority: Priority = Field(Priority.MEDIUM, description="LOW, MEDIUM, HIGH, CRITICAL")
    tags: List[str] = Field(default_factory=list, description="Теги задачи")
    story_points: Optional[int] = Field(None, ge=1, le=100, description="Story points")

class TaskCreate(TaskBase):
    """
    TaskCreate — создание новой задачи. Статус всегда TODO.
    """
    origin: TaskOrigin = Field(TaskOrigin.HUMAN, description="HUMAN или AI")
    actor: Actor = Field(None, examples=["agent"], description="Кто создаёт: human или agent")

class TaskUpdate(BaseModel):
    """
    TaskUpdate — частичное обновление задачи (все поля опциональны).
    Статус и остальные поля валидируются политикой переходов.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    tags: Optional[List[str]] = None
    position: Optional[int] = None
    is_active: Optional[bool] = None
    story_points: Optional[int] = None
    blocked_reason: Optional[str] = None
    blocked_by: Optional[List[str]] = Field(None, description="ID задач-блокеров (полная замена)")
    blocking: Optional[List[str]] = Field(None, description="Только для чтения, любое значение отклоняется")
    expected_version: Optional[int] = Field(None, description="Оптимистическая проверка версии")
    actor: Actor = None

class TaskRef(BaseModel):
    """
    TaskRef — короткая ссылка на задачу (для зависимостей и ленты активности).
    """
    id: str
    task_number: int
    title: str
    status: str

    model_config = ConfigDict(from_attributes=True)

class TaskRead(TaskBase):
    """
    TaskRead — полная схема задачи для ответа и для broadcast.
    """
    id: str
    task_number: int
    status: TaskStatus
    priority: str
    position: int
    is_active: bool
    origin: str
    blocked_reason: Optional[str] = None
    is_blocked: bool
    archived: bool
    archived_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    version: int
    comments: List[CommentRead] = Field(default_factory=list)
    subtasks: List[SubtaskRead] = Field(default_factory=list)
    attachments: List[AttachmentRead] = Field(default_factory=list)
    blocked_by: List[TaskRef] = Field(default_factory=list)
    blocking: List[TaskRef] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
