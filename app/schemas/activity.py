#app/schemas/activity.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from app.schemas.task import TaskRef

class ActivityRead(BaseModel):
    """
    ActivityRead — запись ленты активности вместе с краткой ссылкой на задачу.
    """
    id: str
    task_id: str
    type: str
    actor: str
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime
    task: Optional[TaskRef] = None

    model_config = ConfigDict(from_attributes=True)
