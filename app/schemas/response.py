#app/schemas/response.py
from pydantic import BaseModel, Field
from typing import Any, Optional

class ErrorResponse(BaseModel):
    """
    ErrorResponse — тело ответа при ошибке (404/400/409/500).
    """
    detail: str = Field(..., examples=["Task 3f2a... not found."], description="Сообщение об ошибке")

class SuccessResponse(BaseModel):
    """
    SuccessResponse — универсальный ответ с результатом выполнения операции.
    """
    success: bool = Field(True, description="Операция выполнена")
    result: Any = Field(None, description="Результат (например, id удалённой сущности)")
    detail: Optional[str] = Field(None, examples=["Task deleted"], description="Дополнительная информация")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
