"""
SQLAlchemy model for contacts
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Index, Integer,
                        String, Uuid)
from sqlalchemy.orm import relationship

from addressbook.components.contracts import NAME_MAX_LENGTH, PHONE_MAX_LENGTH
from addressbook.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(Base):
    """
    Address book entry owned by exactly one user
    """
    __tablename__ = "contacts"

    # Insertion sequence; lists are ordered by it
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid4)

    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(PHONE_MAX_LENGTH), nullable=False)
    favorite = Column(Boolean, nullable=False, default=False)

    # Set once from the caller's identity, never from the payload
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="contacts")

    # Indexes
    __table_args__ = (
        Index("idx_contacts_owner_seq", "owner_id", "seq"),
        Index("idx_contacts_owner_favorite", "owner_id", "favorite"),
    )

    # Fields a full update may replace
    WRITABLE_FIELDS = ("name", "email", "phone", "favorite")

    def to_dict(self):
        """Public representation"""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "favorite": self.favorite,
            "owner": str(self.owner_id),
        }

    def __repr__(self):
        return f"<Contact(id={self.id}, name={self.name}, owner_id={self.owner_id})>"
