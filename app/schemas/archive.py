#app/schemas/archive.py
from pydantic import BaseModel, Field
from typing import List

from app.schemas.task import TaskRead

class ArchiveStats(BaseModel):
    total_archived: int = Field(..., description="Сколько задач в архиве всего")
    total_points: int = Field(..., description="Сумма story points архивных задач")

class ArchiveResponse(BaseModel):
    """
    ArchiveResponse — архивные задачи (с учётом фильтров) и общая статистика архива.
    """
    tasks: List[TaskRead]
    stats: ArchiveStats
