"""
SQLAlchemy models
"""
from addressbook.core.database import Base  # noqa: F401
# Import all models here so Alembic can detect them
from addressbook.models.contact import Contact  # noqa: F401
from addressbook.models.user import Session, User  # noqa: F401
