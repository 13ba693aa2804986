# app/dependencies.py

from typing import Generator
from fastapi import Request
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.services.broadcast import BroadcastHub

def get_db() -> Generator[Session, None, None]:
    """
    Создает и возвращает сессию базы данных, гарантирует закрытие после использования.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_hub(request: Request) -> BroadcastHub:
    """
    Хаб рассылки, созданный при старте приложения (app.state.hub).
    """
    return request.app.state.hub
