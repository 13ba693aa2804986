#app/crud/attachment.py
from sqlalchemy.orm import Session
from app.models.attachment import Attachment, AttachmentType
from app.core.exceptions import AttachmentNotFound, AttachmentValidationError
from app.crud.task import get_task, commit_or_raise
import logging
from typing import List

logger = logging.getLogger("OCB.Attachments")

def get_attachments(db: Session, task_id: str) -> List[Attachment]:
    """
    Вложения задачи, новые сверху.
    """
    get_task(db, task_id)
    return db.query(Attachment).filter(Attachment.task_id == task_id).order_by(Attachment.created_at.desc()).all()

def create_attachment(db: Session, task_id: str, data: dict) -> Attachment:
    """
    Прикрепляет ссылку/код/заметку/файл к задаче.
    """
    task = get_task(db, task_id)
    try:
        attachment_type = AttachmentType(data.get("type")).value
    except ValueError:
        allowed = ", ".join(t.value for t in AttachmentType)
        raise AttachmentValidationError(f"Invalid attachment type '{data.get('type')}'. Use one of: {allowed}.")
    content = data.get("content")
    if not content or not str(content).strip():
        raise AttachmentValidationError("Attachment content cannot be empty.")

    attachment = Attachment(
        type=attachment_type,
        title=data.get("title"),
        content=content,
        mime_type=data.get("mime_type"),
    )
    task.attachments.append(attachment)
    commit_or_raise(db, f"add attachment to task {task_id}")
    db.refresh(attachment)
    logger.info(f"Added {attachment_type} attachment {attachment.id} to task {task_id}")
    return attachment

def delete_attachment(db: Session, task_id: str, attachment_id: str) -> str:
    attachment = (
        db.query(Attachment)
        .filter(Attachment.id == attachment_id, Attachment.task_id == task_id)
        .first()
    )
    if not attachment:
        raise AttachmentNotFound(f"Attachment {attachment_id} not found on task {task_id}.")
    db.delete(attachment)
    commit_or_raise(db, f"delete attachment {attachment_id}")
    logger.info(f"Deleted attachment {attachment_id} from task {task_id}")
    return attachment_id
