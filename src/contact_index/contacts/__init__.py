"""Contact records, their JSON storage and filtering predicates."""

from contact_index.contacts.filters import ContactPredicate, created_date_filter
from contact_index.contacts.repository import JsonContactRepository, RepositoryError
from contact_index.contacts.schemas import (
    Contact,
    ContactCreate,
    ContactList,
    ContactUpdate,
    DateComparison,
    NextIdResponse,
    SaveResponse,
)

__all__ = [
    "Contact",
    "ContactCreate",
    "ContactList",
    "ContactPredicate",
    "ContactUpdate",
    "DateComparison",
    "JsonContactRepository",
    "NextIdResponse",
    "RepositoryError",
    "SaveResponse",
    "created_date_filter",
]
