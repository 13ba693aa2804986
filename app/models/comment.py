#app/models/comment.py
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.models.base import Base
from app.models.task import new_id, utcnow

class Comment(Base):
    """
    Comment — комментарий к задаче (от человека или агента).
    """
    __tablename__ = "comments"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_id: str = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    content: str = Column(Text, nullable=False)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="comments")

    def __repr__(self):
        return f"<Comment(id={self.id}, task_id={self.task_id})>"
