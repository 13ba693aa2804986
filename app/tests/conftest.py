import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from typing import Generator

# Тестовая БД задаётся до импорта settings и приложения
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

# Сначала все модели (app/models/__init__.py), чтобы Base.metadata была полной
import app.models

from app.models.base import Base

from app.core.settings import settings as app_settings
app_settings.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///:memory:")
app_settings.DONE_COLUMN_LIMIT = 5

# Приложение импортируем после настроек и моделей
from app.main import app

SQLALCHEMY_DATABASE_URL = app_settings.DATABASE_URL

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

from app.dependencies import get_db


@pytest.fixture(scope="session", autouse=True)
def create_test_tables_session_scope():
    """
    Все таблицы создаются один раз на сессию и удаляются в конце.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Сессия на тест: всё, что тест закоммитил, откатывается внешней транзакцией.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    TestClient с подменённым get_db. Сессию закрывает фикстура db.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    del app.dependency_overrides[get_db]

