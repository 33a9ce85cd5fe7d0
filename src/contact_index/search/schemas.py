"""Pydantic schemas for name search API responses."""

from pydantic import BaseModel, Field

from contact_index.contacts.schemas import Contact


class SearchResponse(BaseModel):
    """Prefix search response envelope.

    Attributes:
        query: The original search text.
        results: Contacts whose name starts with the query, unordered.
        total: Number of matching contacts.
    """

    query: str
    results: list[Contact] = Field(description="Matches in no particular order")
    total: int
