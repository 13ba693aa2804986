#app/crud/comment.py
from sqlalchemy.orm import Session
from app.models.comment import Comment
from app.core.exceptions import CommentNotFound, CommentValidationError
from app.crud.task import get_task, commit_or_raise
import logging
from typing import List

logger = logging.getLogger("OCB.Comments")

def get_comments(db: Session, task_id: str) -> List[Comment]:
    """
    Комментарии задачи, старые сверху.
    """
    get_task(db, task_id)
    return db.query(Comment).filter(Comment.task_id == task_id).order_by(Comment.created_at.asc()).all()

def create_comment(db: Session, task_id: str, data: dict) -> Comment:
    """
    Добавляет комментарий к задаче.
    """
    task = get_task(db, task_id)
    content = (data.get("content") or "").strip()
    if not content:
        raise CommentValidationError("Comment content cannot be empty.")

    comment = Comment(content=content)
    task.comments.append(comment)
    commit_or_raise(db, f"add comment to task {task_id}")
    db.refresh(comment)
    logger.info(f"Added comment {comment.id} to task {task_id}")
    return comment

def delete_comment(db: Session, task_id: str, comment_id: str) -> str:
    comment = (
        db.query(Comment)
        .filter(Comment.id == comment_id, Comment.task_id == task_id)
        .first()
    )
    if not comment:
        raise CommentNotFound(f"Comment {comment_id} not found on task {task_id}.")
    db.delete(comment)
    commit_or_raise(db, f"delete comment {comment_id}")
    logger.info(f"Deleted comment {comment_id} from task {task_id}")
    return comment_id
