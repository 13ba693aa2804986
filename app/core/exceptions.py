# app/core/exceptions.py

class BaseAppException(Exception):
    """Базовый класс для всех кастомных исключений приложения."""
    def __init__(self, message: str = "App exception"):
        super().__init__(message)

# ==== Валидация ====

class ValidationError(BaseAppException):
    """Общая ошибка валидации."""
    def __init__(self, message: str = "Validation error"):
        super().__init__(message)

class TaskValidationError(ValidationError):
    """Ошибка валидации задачи."""
    def __init__(self, message: str = "Task validation error"):
        super().__init__(message)

class CommentValidationError(ValidationError):
    """Ошибка валидации комментария."""
    def __init__(self, message: str = "Comment validation error"):
        super().__init__(message)

class SubtaskValidationError(ValidationError):
    """Ошибка валидации сабтаска."""
    def __init__(self, message: str = "Subtask validation error"):
        super().__init__(message)

class AttachmentValidationError(ValidationError):
    """Ошибка валидации вложения."""
    def __init__(self, message: str = "Attachment validation error"):
        super().__init__(message)

# ==== NotFound ====

class NotFoundError(BaseAppException):
    """Ошибка отсутствия ресурса."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    """Ошибка: задача не найдена."""
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class CommentNotFound(NotFoundError):
    """Ошибка: комментарий не найден."""
    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)

class SubtaskNotFound(NotFoundError):
    """Ошибка: сабтаск не найден."""
    def __init__(self, message: str = "Subtask not found"):
        super().__init__(message)

class AttachmentNotFound(NotFoundError):
    """Ошибка: вложение не найдено."""
    def __init__(self, message: str = "Attachment not found"):
        super().__init__(message)

# ==== Хранилище ====

class StoreError(BaseAppException):
    """Ошибка слоя хранения (соединение, constraint и т.д.)."""
    def __init__(self, message: str = "Store error"):
        super().__init__(message)

class VersionConflict(BaseAppException):
    """Ошибка: задача изменена другим запросом (expected_version не совпал)."""
    def __init__(self, message: str = "Version conflict"):
        super().__init__(message)
