#app/models/attachment.py
import enum
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.models.base import Base
from app.models.task import new_id, utcnow


class AttachmentType(str, enum.Enum):
    LINK = "link"
    CODE = "code"
    NOTE = "note"
    FILE = "file"


class Attachment(Base):
    """
    Attachment — ссылка, фрагмент кода, заметка или файл, прикреплённые к задаче.
    """
    __tablename__ = "attachments"

    id: str = Column(String(32), primary_key=True, default=new_id)
    task_id: str = Column(String(32), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    type: str = Column(String(8), nullable=False, doc="link, code, note, file")
    title: str = Column(String(255), nullable=True)
    content: str = Column(Text, nullable=False)
    mime_type: str = Column(String(128), nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="attachments")

    def __repr__(self):
        return f"<Attachment(id={self.id}, task_id={self.task_id}, type={self.type})>"
