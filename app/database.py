# app/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.settings import settings

# SQLite нужен check_same_thread=False: async-хендлеры и threadpool делят соединения
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# Создаем движок подключения к БД
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# Фабрика сессий: одна сессия на запрос (см. app.dependencies.get_db).
# expire_on_commit=False: задача после коммита ещё сериализуется для broadcast
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
