#app/schemas/comment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class CommentCreate(BaseModel):
    """
    CommentCreate — новый комментарий к задаче.
    """
    content: str = Field(..., examples=["Picked this up, PR incoming."], description="Текст комментария")
    author: Optional[str] = Field(None, description="Подпись автора (CLI шлёт 'AI'), не хранится")

class CommentRead(BaseModel):
    id: str
    task_id: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
