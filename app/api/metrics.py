#app/api/metrics.py
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Union

from app.schemas.metrics import BoardMetrics, DetailedBoardMetrics
from app.services.metrics import compute_metrics
from app.dependencies import get_db

logger = logging.getLogger("OCB.MetricsAPI")

router = APIRouter(prefix="/metrics", tags=["Metrics"])

@router.get("/", response_model=Union[DetailedBoardMetrics, BoardMetrics])
def board_metrics(
    days: int = Query(30, ge=1, le=365),
    detailed: bool = Query(False),
    db: Session = Depends(get_db),
):
    """
    Метрики доски за последние `days` дней. detailed=true добавляет
    разбивку по задачам и velocity по дням.
    """
    metrics = compute_metrics(db, days=days, detailed=detailed)
    logger.debug(f"Metrics requested: days={days}, detailed={detailed}")
    if detailed:
        return DetailedBoardMetrics(**metrics)
    return BoardMetrics(**metrics)
