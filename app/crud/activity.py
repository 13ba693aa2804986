#app/crud/activity.py
from sqlalchemy.orm import Session, joinedload
from app.models.activity import Activity
from app.core.settings import settings
from app.services.transitions import normalize_actor
from typing import List, Optional

DEFAULT_FEED_SIZE = 50

def get_activities(
    db: Session,
    limit: int = DEFAULT_FEED_SIZE,
    actor: Optional[str] = None,
    task_id: Optional[str] = None,
) -> List[Activity]:
    """
    Лента активности: новые сверху, не больше ACTIVITY_FEED_MAX записей.
    Журнал только дописывается, поэтому здесь нет update/delete.
    """
    query = db.query(Activity).options(joinedload(Activity.task))
    if actor:
        query = query.filter(Activity.actor == normalize_actor(actor))
    if task_id:
        query = query.filter(Activity.task_id == task_id)
    limit = max(1, min(limit, settings.ACTIVITY_FEED_MAX))
    return query.order_by(Activity.created_at.desc()).limit(limit).all()
