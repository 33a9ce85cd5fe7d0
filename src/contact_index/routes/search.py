"""Name prefix search API endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request

from contact_index.search.schemas import SearchResponse

if TYPE_CHECKING:
    from contact_index.contacts.service import ContactService

router = APIRouter(tags=["search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Prefix search over contact names",
    description="Case-insensitive match of every contact whose name starts with the query.",
)
async def search(
    request: Request,
    q: str = Query(
        ...,
        min_length=1,
        max_length=200,
        description="Name prefix",
    ),
) -> SearchResponse:
    """Search contacts by name prefix.

    Args:
        request: FastAPI request (provides access to app state).
        q: Name prefix (1-200 characters, any case).

    Returns:
        All matching contacts, unordered and unpaginated.
    """
    service: ContactService = request.app.state.contact_service
    results = service.search_contacts(q)
    return SearchResponse(query=q, results=results, total=len(results))
