# app/initial_data.py

import logging
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

import app.models  # noqa: F401  регистрирует все таблицы в Base.metadata
from app.models.base import Base
from app.database import engine as default_engine

logger = logging.getLogger("OCB.InitialData")

def init_db(engine: Engine = None) -> None:
    """
    Создаёт недостающие таблицы доски. Существующие не трогает.
    """
    engine = engine or default_engine
    existing = set(inspect(engine).get_table_names())
    missing = [name for name in Base.metadata.tables if name not in existing]
    Base.metadata.create_all(bind=engine)
    if missing:
        logger.info(f"Created tables: {', '.join(sorted(missing))}")
    else:
        logger.info("Database schema is up to date.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
