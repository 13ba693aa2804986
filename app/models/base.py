#app/models/base.py
"""
Декларативная база для таблиц доски (tasks и их дочерних записей).

Все модели импортируются в app.models, поэтому Base.metadata.create_all
после `import app.models` видит полную схему.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
