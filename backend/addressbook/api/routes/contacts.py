"""
Contacts API routes

Every route requires a bearer token; all reads and writes are scoped to the caller.
"""
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from addressbook.components.contact_query import build_list_query
from addressbook.components.contact_validator import require_valid_contact
from addressbook.core.auth import get_current_user
from addressbook.core.config import get_settings
from addressbook.core.database import get_db
from addressbook.core.errors import NotFound, ValidationError
from addressbook.core.logging_config import LoggingConfig
from addressbook.models.contact import Contact
from addressbook.models.user import User
from addressbook.services.contact_repository import ContactRepository

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


class ContactResponse(BaseModel):
    """Contact response model"""
    id: UUID
    name: str
    email: str
    phone: str
    favorite: bool
    owner: UUID


class MessageResponse(BaseModel):
    message: str


def _to_response(contact: Contact) -> ContactResponse:
    return ContactResponse(**contact.to_dict())


def _parse_contact_id(contact_id: str) -> UUID:
    """Ids that cannot exist are reported the same way as ids that do not"""
    try:
        return UUID(contact_id)
    except ValueError:
        raise NotFound() from None


@router.get("", response_model=List[ContactResponse])
def list_contacts(
    response: Response,
    page: Optional[str] = Query(None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(None, description="Page size (default 20)"),
    favorite: Optional[str] = Query(None, description="'true' or 'false' to filter on favorite"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the caller's contacts, paginated and optionally filtered by favorite.

    The total number of matching contacts is returned in the X-Total-Count header.
    """
    settings = get_settings()
    query = build_list_query(
        owner_id=current_user.id,
        page=page,
        limit=limit,
        favorite=favorite,
        default_limit=settings.contacts_default_page_limit,
        max_limit=settings.contacts_max_page_limit,
    )

    repository = ContactRepository(db)
    contacts = repository.list(query.filter, skip=query.skip, limit=query.limit)
    response.headers["X-Total-Count"] = str(repository.count(query.filter))
    return [_to_response(contact) for contact in contacts]


@router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(
    contact_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one of the caller's contacts by ID"""
    contact = ContactRepository(db).get_by_id(_parse_contact_id(contact_id), current_user.id)
    if contact is None:
        raise NotFound()
    return _to_response(contact)


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def create_contact(
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a contact owned by the caller"""
    values = require_valid_contact(payload)
    contact = ContactRepository(db).create(values, owner_id=current_user.id)
    return _to_response(contact)


@router.delete("/{contact_id}", response_model=MessageResponse)
def delete_contact(
    contact_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one of the caller's contacts"""
    removed = ContactRepository(db).delete_by_id(_parse_contact_id(contact_id), current_user.id)
    if removed is None:
        raise NotFound()
    return MessageResponse(message="Contact Deleted")


@router.put("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: str,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace every field of one of the caller's contacts"""
    values = require_valid_contact(payload)
    contact = ContactRepository(db).update_by_id(_parse_contact_id(contact_id), current_user.id, values)
    if contact is None:
        raise NotFound()
    return _to_response(contact)


@router.patch("/{contact_id}/favorite", response_model=ContactResponse)
def update_favorite(
    contact_id: str,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set the favorite flag of one of the caller's contacts"""
    favorite = payload.get("favorite") if isinstance(payload, dict) else None
    if not isinstance(favorite, bool):
        raise ValidationError("missing field favorite")

    contact = ContactRepository(db).update_favorite(_parse_contact_id(contact_id), current_user.id, favorite)
    if contact is None:
        raise NotFound()
    return _to_response(contact)
