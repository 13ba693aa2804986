import pytest
from sqlalchemy.orm import Session

from app.crud.comment import get_comments, create_comment, delete_comment
from app.crud.subtask import get_subtasks, create_subtask, update_subtask, delete_subtask
from app.crud.attachment import get_attachments, create_attachment, delete_attachment
from app.crud.activity import get_activities
from app.crud.task import create_task, update_task
from app.core.settings import settings as app_settings
from app.core.exceptions import (
    TaskNotFound,
    CommentNotFound,
    CommentValidationError,
    SubtaskNotFound,
    SubtaskValidationError,
    AttachmentNotFound,
    AttachmentValidationError,
)


@pytest.fixture
def task(db: Session):
    return create_task(db, {"title": "Parent task"})

# --- Comments ---

def test_create_and_list_comments(db: Session, task):
    create_comment(db, task.id, {"content": "first"})
    create_comment(db, task.id, {"content": "  second  "})

    comments = get_comments(db, task.id)
    assert [c.content for c in comments] == ["first", "second"]
    assert len(task.comments) == 2

def test_create_comment_empty(db: Session, task):
    with pytest.raises(CommentValidationError):
        create_comment(db, task.id, {"content": "   "})

def test_create_comment_unknown_task(db: Session):
    with pytest.raises(TaskNotFound):
        create_comment(db, "missing", {"content": "hello"})

def test_delete_comment(db: Session, task):
    comment = create_comment(db, task.id, {"content": "temporary"})
    assert delete_comment(db, task.id, comment.id) == comment.id
    assert get_comments(db, task.id) == []
    with pytest.raises(CommentNotFound):
        delete_comment(db, task.id, comment.id)

# --- Subtasks ---

def test_subtasks_append_in_order(db: Session, task):
    first = create_subtask(db, task.id, {"title": "Write tests"})
    second = create_subtask(db, task.id, {"title": "Ship it"})
    assert (first.position, second.position) == (0, 1)
    assert [s.title for s in get_subtasks(db, task.id)] == ["Write tests", "Ship it"]

def test_update_subtask(db: Session, task):
    subtask = create_subtask(db, task.id, {"title": "Check"})
    updated = update_subtask(db, task.id, subtask.id, {"completed": True, "title": "Checked"})
    assert updated.completed is True
    assert updated.title == "Checked"

    with pytest.raises(SubtaskValidationError):
        update_subtask(db, task.id, subtask.id, {"title": ""})

def test_subtask_not_found(db: Session, task):
    with pytest.raises(SubtaskNotFound):
        update_subtask(db, task.id, "missing", {"completed": True})
    with pytest.raises(SubtaskNotFound):
        delete_subtask(db, task.id, "missing")

def test_delete_subtask(db: Session, task):
    subtask = create_subtask(db, task.id, {"title": "Remove me"})
    delete_subtask(db, task.id, subtask.id)
    assert get_subtasks(db, task.id) == []

# --- Attachments ---

def test_create_attachment(db: Session, task):
    link = create_attachment(db, task.id, {"type": "link", "title": "Docs", "content": "https://example.com"})
    assert link.type == "link"
    assert [a.id for a in get_attachments(db, task.id)] == [link.id]

@pytest.mark.parametrize("payload", [
    {"type": "video", "content": "x"},
    {"type": "note", "content": "  "},
])
def test_create_attachment_validation(db: Session, task, payload: dict):
    with pytest.raises(AttachmentValidationError):
        create_attachment(db, task.id, payload)

def test_delete_attachment(db: Session, task):
    note = create_attachment(db, task.id, {"type": "note", "content": "remember the milk"})
    delete_attachment(db, task.id, note.id)
    with pytest.raises(AttachmentNotFound):
        delete_attachment(db, task.id, note.id)

# --- Activity feed ---

def test_activity_feed_filters(db: Session, task):
    update_task(db, task.id, {"status": "IN_PROGRESS", "is_active": True}, actor="agent")
    other = create_task(db, {"title": "Other"})

    agent_entries = get_activities(db, actor="agent")
    assert {a.type for a in agent_entries} == {"status_change", "started_work"}
    assert all(a.task.id == task.id for a in agent_entries)

    other_entries = get_activities(db, task_id=other.id)
    assert [a.type for a in other_entries] == ["created"]

def test_activity_feed_limit_is_capped(db: Session, monkeypatch):
    monkeypatch.setattr(app_settings, "ACTIVITY_FEED_MAX", 3)
    for i in range(5):
        create_task(db, {"title": f"Busy {i}"})
    assert len(get_activities(db, limit=50)) == 3
    assert len(get_activities(db, limit=2)) == 2
