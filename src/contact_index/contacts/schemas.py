"""Pydantic schemas for contacts and the contacts API."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(BaseModel):
    """A stored contact record.

    Attributes:
        id: Unique identifier, fixed once the contact is stored.
        name: Display name, indexed for prefix search.
        email: Unique secondary key.
        phone: Phone number, carried as payload.
        created_at: Creation timestamp in UTC.
    """

    id: int
    name: str
    email: str
    phone: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class ContactCreate(BaseModel):
    """Request body for creating a contact."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)
    phone: str = Field(min_length=1, max_length=50)


class ContactUpdate(BaseModel):
    """Request body for editing a contact.

    Omitted fields keep their current value.
    """

    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, min_length=3, max_length=320)
    phone: str | None = Field(default=None, min_length=1, max_length=50)


class DateComparison(str, Enum):
    """How a contact's creation date relates to a target date."""

    BEFORE = "before"
    AFTER = "after"
    ON = "on"


class ContactList(BaseModel):
    """Contact listing response."""

    contacts: list[Contact]
    total: int


class NextIdResponse(BaseModel):
    """Candidate identifier for a new contact."""

    id: int


class SaveResponse(BaseModel):
    """Result of persisting the contact set."""

    saved: int
    path: str
