#app/models/subtask.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.models.base import Base
from app.models.task import new_id, utcnow

class Subtask(Base):
    """
    Subtask — пункт чеклиста внутри задачи.
    """
    __tablename__ = "subtasks"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_id: str = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title: str = Column(String(255), nullable=False)
    completed: bool = Column(Boolean, nullable=False, default=False)
    position: int = Column(Integer, nullable=False, default=0)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="subtasks")

    def __repr__(self):
        return f"<Subtask(id={self.id}, task_id={self.task_id}, completed={self.completed})>"
