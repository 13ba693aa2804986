#app/schemas/subtask.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class SubtaskCreate(BaseModel):
    """
    SubtaskCreate — новый пункт чеклиста. Без position — в конец списка.
    """
    title: str = Field(..., description="Название сабтаска")
    position: Optional[int] = Field(None, ge=0, description="Позиция в чеклисте")

class SubtaskUpdate(BaseModel):
    """
    SubtaskUpdate — обновление сабтаска (все поля опциональны).
    """
    title: Optional[str] = None
    completed: Optional[bool] = None
    position: Optional[int] = Field(None, ge=0)

class SubtaskRead(BaseModel):
    id: str
    task_id: str
    title: str
    completed: bool
    position: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
