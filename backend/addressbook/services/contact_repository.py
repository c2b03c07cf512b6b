"""
Owner-scoped persistence for contacts
"""
from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from addressbook.components.contracts import ContactFilter
from addressbook.core.logging_config import LoggingConfig
from addressbook.core.metrics import contact_operations_total
from addressbook.models.contact import Contact

logger = LoggingConfig.get_logger(__name__)


class ContactRepository:
    """
    CRUD operations on contacts.

    Every id-based operation matches on both the contact id and the owner id, so a
    contact that belongs to another user behaves exactly like a missing one. Each
    write runs in a single transaction on a row loaded FOR UPDATE, which serialises
    concurrent writers to the same contact; on any storage error the transaction is
    rolled back and the error re-raised.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _owned(self, contact_id: UUID, owner_id: UUID):
        return self.db.query(Contact).filter(
            Contact.id == contact_id,
            Contact.owner_id == owner_id,
        )

    def _filtered(self, contact_filter: ContactFilter):
        query = self.db.query(Contact).filter(Contact.owner_id == contact_filter.owner_id)
        if contact_filter.favorite is not None:
            query = query.filter(Contact.favorite == contact_filter.favorite)
        return query

    def _record(self, operation: str, contact: Optional[Contact]) -> Optional[Contact]:
        contact_operations_total.labels(
            operation=operation,
            outcome="ok" if contact is not None else "not_found"
        ).inc()
        return contact

    def list(self, contact_filter: ContactFilter, skip: int, limit: int) -> List[Contact]:
        """
        List contacts matching a filter in insertion order

        Args:
            contact_filter: Owner (always) and optional favorite predicate
            skip: Number of matching contacts to skip
            limit: Maximum number of contacts to return
        """
        contacts = self._filtered(contact_filter).order_by(
            Contact.seq
        ).offset(skip).limit(limit).all()
        contact_operations_total.labels(operation="list", outcome="ok").inc()
        return contacts

    def count(self, contact_filter: ContactFilter) -> int:
        """Number of contacts matching a filter"""
        return self._filtered(contact_filter).count()

    def get_by_id(self, contact_id: UUID, owner_id: UUID) -> Optional[Contact]:
        """Get a contact by ID if it belongs to owner_id"""
        return self._record("get", self._owned(contact_id, owner_id).first())

    def create(self, payload: Dict[str, Any], owner_id: UUID) -> Contact:
        """
        Persist a new contact

        Args:
            payload: Validated contact fields (name, email, phone, favorite)
            owner_id: Caller identity; never taken from the payload
        """
        contact = Contact(
            name=payload["name"],
            email=payload["email"],
            phone=payload["phone"],
            favorite=payload.get("favorite", False),
            owner_id=owner_id,
        )
        with self._transaction():
            self.db.add(contact)
        self.db.refresh(contact)

        logger.info(
            "Created contact",
            extra={"contact_id": str(contact.id), "owner_id": str(owner_id)}
        )
        return self._record("create", contact)

    def delete_by_id(self, contact_id: UUID, owner_id: UUID) -> Optional[Contact]:
        """Remove a contact; returns the removed record or None if not found"""
        with self._transaction():
            contact = self._owned(contact_id, owner_id).with_for_update().first()
            if contact is not None:
                self.db.delete(contact)

        if contact is not None:
            logger.info(
                "Deleted contact",
                extra={"contact_id": str(contact_id), "owner_id": str(owner_id)}
            )
        return self._record("delete", contact)

    def update_by_id(self, contact_id: UUID, owner_id: UUID, payload: Dict[str, Any]) -> Optional[Contact]:
        """Replace every writable field of a contact; id and owner never change"""
        with self._transaction():
            contact = self._owned(contact_id, owner_id).with_for_update().first()
            if contact is not None:
                for field in Contact.WRITABLE_FIELDS:
                    setattr(contact, field, payload[field])

        if contact is not None:
            self.db.refresh(contact)
            logger.info(
                "Updated contact",
                extra={"contact_id": str(contact_id), "owner_id": str(owner_id)}
            )
        return self._record("update", contact)

    def update_favorite(self, contact_id: UUID, owner_id: UUID, favorite: bool) -> Optional[Contact]:
        """Set only the favorite flag of a contact"""
        with self._transaction():
            contact = self._owned(contact_id, owner_id).with_for_update().first()
            if contact is not None:
                contact.favorite = favorite

        if contact is not None:
            self.db.refresh(contact)
            logger.info(
                "Updated contact favorite",
                extra={"contact_id": str(contact_id), "owner_id": str(owner_id), "favorite": favorite}
            )
        return self._record("update_favorite", contact)
