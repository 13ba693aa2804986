#app/models/status_history.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import Base
from app.models.task import new_id, utcnow

class StatusHistory(Base):
    """
    StatusHistory — сколько задача провела в каждом статусе (для метрик).
    Запись открывается при входе в статус и закрывается при выходе.
    """
    __tablename__ = "status_history"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_id: str = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    status: str = Column(String(24), nullable=False)
    entered_at: datetime = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    exited_at: datetime = Column(DateTime(timezone=True), nullable=True)
    duration: int = Column(Integer, nullable=True, doc="Секунды в статусе, пока запись открыта — NULL")

    task = relationship("Task", back_populates="status_history")

    def __repr__(self):
        return f"<StatusHistory(task_id={self.task_id}, status={self.status}, duration={self.duration})>"
