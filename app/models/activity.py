#app/models/activity.py
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from app.models.base import Base
from app.models.task import new_id, utcnow

class Activity(Base):
    """
    Activity — неизменяемая запись журнала: кто (human/agent) и что поменял в задаче.
    """
    __tablename__ = "activities"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_id: str = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    type: str = Column(String(32), nullable=False, doc="created, status_change, started_work, stopped_work, blocked, unblocked, field_update")
    actor: str = Column(String(8), nullable=False, default="human", doc="human или agent")
    field: str = Column(String(64), nullable=True)
    old_value: str = Column(Text, nullable=True)
    new_value: str = Column(Text, nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="activities")

    __table_args__ = (
        Index("ix_activities_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Activity(id={self.id}, task_id={self.task_id}, type={self.type}, actor={self.actor})>"
