#app/api/attachment.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from app.schemas.attachment import AttachmentCreate, AttachmentRead
from app.schemas.response import SuccessResponse, ERROR_RESPONSES
from app.crud.attachment import get_attachments, create_attachment, delete_attachment
from app.services import board
from app.services.broadcast import BroadcastHub
from app.dependencies import get_db, get_hub
from app.core.exceptions import (
    TaskNotFound,
    AttachmentNotFound,
    AttachmentValidationError,
    StoreError,
)

logger = logging.getLogger("OCB.AttachmentsAPI")

router = APIRouter(prefix="/tasks/{task_id}/attachments", tags=["Attachments"], responses=ERROR_RESPONSES)

@router.get("/", response_model=List[AttachmentRead])
def list_attachments(task_id: str, db: Session = Depends(get_db)):
    try:
        return get_attachments(db, task_id)
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

@router.post("/", response_model=AttachmentRead, status_code=status.HTTP_201_CREATED)
async def add_attachment(
    task_id: str,
    data: AttachmentCreate,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """
    Прикрепить ссылку, фрагмент кода, заметку или файл.
    """
    try:
        attachment = create_attachment(db, task_id, data.model_dump(mode="json"))
    except TaskNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    except AttachmentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return attachment

@router.delete("/{attachment_id}", response_model=SuccessResponse)
async def remove_attachment(
    task_id: str,
    attachment_id: str,
    db: Session = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    try:
        deleted_id = delete_attachment(db, task_id, attachment_id)
    except AttachmentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    await board.publish_task_changed(db, hub, task_id)
    return SuccessResponse(result=deleted_id, detail="Attachment deleted")
