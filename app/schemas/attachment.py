#app/schemas/attachment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.models.attachment import AttachmentType

class AttachmentCreate(BaseModel):
    """
    AttachmentCreate — вложение к задаче: ссылка, код, заметка или файл.
    """
    type: AttachmentType = Field(..., examples=["link"], description="link, code, note, file")
    title: Optional[str] = Field(None, examples=["Design doc"], description="Заголовок")
    content: str = Field(..., examples=["https://example.com/doc"], description="URL, код или текст")
    mime_type: Optional[str] = Field(None, examples=["text/x-python"], description="MIME-тип (для file/code)")

class AttachmentRead(BaseModel):
    """
    AttachmentRead — вложение в ответе API.
    """
    id: str
    task_id: str
    type: str
    title: Optional[str] = None
    content: str
    mime_type: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
