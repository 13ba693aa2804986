#app/models/task.py
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, JSON, Boolean, Index, Table, func
)
from sqlalchemy.orm import relationship
from app.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite отдаёт naive datetime: считаем его UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_id() -> str:
    return uuid.uuid4().hex


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    NEEDS_REVIEW = "NEEDS_REVIEW"
    DONE = "DONE"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TaskOrigin(str, enum.Enum):
    HUMAN = "HUMAN"
    AI = "AI"


# blocked_by: task_id ждёт завершения blocked_by_id
task_dependencies = Table(
    "task_dependencies",
    Base.metadata,
    Column("task_id", String(32), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("blocked_by_id", String(32), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
)


class Task(Base):
    """
    Task — карточка на доске. Статус, таймстемпы переходов, архив, зависимости,
    сабтаски, комментарии, вложения и журнал активности.
    """
    __tablename__ = "tasks"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_number: int = Column(Integer, nullable=False, unique=True, doc="Порядковый номер (OCB-<n>), не переиспользуется")
    title: str = Column(String(255), nullable=False, doc="Название задачи")
    description: str = Column(Text, nullable=True, doc="Описание")
    status: str = Column(String(24), nullable=False, default=TaskStatus.TODO.value, doc="TODO, IN_PROGRESS, NEEDS_REVIEW, DONE")
    priority: str = Column(String(16), nullable=False, default=Priority.MEDIUM.value, doc="LOW, MEDIUM, HIGH, CRITICAL")
    tags: list = Column(JSON, nullable=False, default=lambda: [], doc="Теги задачи")
    position: int = Column(Integer, nullable=False, default=0, doc="Порядок внутри колонки")
    is_active: bool = Column(Boolean, nullable=False, default=False, doc="Над задачей сейчас работают")
    story_points: int = Column(Integer, nullable=True, doc="Story points")
    origin: str = Column(String(8), nullable=False, default=TaskOrigin.HUMAN.value, doc="HUMAN или AI, задаётся при создании")
    blocked_reason: str = Column(Text, nullable=True, doc="Ручная блокировка")
    archived: bool = Column(Boolean, nullable=False, default=False, doc="Скрыта с доски")
    archived_at: datetime = Column(DateTime(timezone=True), nullable=True)
    started_at: datetime = Column(DateTime(timezone=True), nullable=True, doc="Первый переход в IN_PROGRESS")
    reviewed_at: datetime = Column(DateTime(timezone=True), nullable=True)
    completed_at: datetime = Column(DateTime(timezone=True), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, doc="Дата создания")
    updated_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, doc="Дата изменения")
    version: int = Column(Integer, nullable=False, default=1, doc="Растёт на каждом обновлении")

    blocked_by = relationship(
        "Task",
        secondary=task_dependencies,
        primaryjoin=id == task_dependencies.c.task_id,
        secondaryjoin=id == task_dependencies.c.blocked_by_id,
        backref="blocking",
    )
    comments = relationship("Comment", back_populates="task", cascade="all, delete-orphan", order_by="Comment.created_at")
    subtasks = relationship("Subtask", back_populates="task", cascade="all, delete-orphan", order_by="Subtask.position")
    attachments = relationship("Attachment", back_populates="task", cascade="all, delete-orphan", order_by="Attachment.created_at.desc()")
    activities = relationship("Activity", back_populates="task", cascade="all, delete-orphan", order_by="Activity.created_at")
    status_history = relationship("StatusHistory", back_populates="task", cascade="all, delete-orphan", order_by="StatusHistory.entered_at")

    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_archived_status", "archived", "status"),
        Index("ix_tasks_completed_at", "completed_at"),
    )

    @property
    def is_blocked(self) -> bool:
        if self.blocked_reason and self.blocked_reason.strip():
            return True
        return any(dep.status != TaskStatus.DONE.value for dep in self.blocked_by)

    def __repr__(self):
        return (
            f"<Task(id={self.id}, number={self.task_number}, title='{self.title}', "
            f"status={self.status}, archived={self.archived})>"
        )


class TaskCounter(Base):
    """
    TaskCounter — монотонный счётчик номеров задач (одна строка).
    """
    __tablename__ = "task_counters"

    id: int = Column(Integer, primary_key=True)
    last_number: int = Column(Integer, nullable=False, default=0)
