"""Contact CRUD, lookup, filter and save endpoints."""

import asyncio
from datetime import date

import structlog
from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from contact_index.contacts.filters import created_date_filter
from contact_index.contacts.repository import RepositoryError
from contact_index.contacts.schemas import (
    Contact,
    ContactCreate,
    ContactList,
    ContactUpdate,
    DateComparison,
    NextIdResponse,
    SaveResponse,
)
from contact_index.contacts.service import (
    ContactConflictError,
    ContactService,
    ContactValidationError,
)
from contact_index.search.manager import IdSpaceExhaustedError

logger = structlog.get_logger()

router = APIRouter(prefix="/contacts", tags=["contacts"])


def _service(request: Request) -> ContactService:
    return request.app.state.contact_service


def _not_found(contact_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Contact {contact_id} not found",
    )


@router.get("", response_model=ContactList)
async def list_contacts(
    request: Request,
    created: date | None = Query(
        default=None, description="Filter by creation date (YYYY-MM-DD)"
    ),
    compare: DateComparison = Query(
        default=DateComparison.ON,
        description="How creation dates relate to the `created` date",
    ),
) -> ContactList:
    """List all contacts, optionally filtered by creation date.

    Args:
        request: FastAPI request (provides access to app state).
        created: Target date; no filtering when omitted.
        compare: Match contacts created before, after, or on the date.

    Returns:
        Matching contacts in no particular order.
    """
    service = _service(request)
    if created is None:
        contacts = service.list_contacts()
    else:
        contacts = service.filter_contacts(created_date_filter(created, compare))
    return ContactList(contacts=contacts, total=len(contacts))


@router.post(
    "",
    response_model=Contact,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid contact fields"},
        409: {"description": "Email already in use"},
    },
)
async def create_contact(request: Request, body: ContactCreate) -> Contact:
    """Create a contact with a freshly generated id.

    Raises:
        HTTPException: 400 on invalid fields, 409 if the email is taken,
            503 if no id is available.
    """
    try:
        return _service(request).create_contact(
            name=body.name, email=body.email, phone=body.phone
        )
    except ContactValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ContactConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except IdSpaceExhaustedError as e:
        logger.error("contact_id_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.get("/next-id", response_model=NextIdResponse)
async def next_id(request: Request) -> NextIdResponse:
    """Return an id no stored contact holds. Nothing is reserved."""
    try:
        return NextIdResponse(id=_service(request).generate_next_id())
    except IdSpaceExhaustedError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e


@router.get(
    "/by-email",
    response_model=Contact,
    responses={404: {"description": "Contact not found"}},
)
async def get_contact_by_email(
    request: Request,
    email: str = Query(..., min_length=1, description="Exact email address"),
) -> Contact:
    contact = _service(request).find_by_email(email)
    if contact is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No contact found with that email",
        )
    return contact


@router.post("/save", response_model=SaveResponse)
async def save_contacts(request: Request) -> SaveResponse:
    """Persist the full contact set to the configured JSON file.

    Raises:
        HTTPException: 500 if the file cannot be written.
    """
    service = _service(request)
    try:
        saved = await asyncio.to_thread(service.save_changes)
    except RepositoryError as e:
        logger.error("contact_save_failed", path=e.path, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to save contacts") from e

    return SaveResponse(saved=saved, path=str(service.repository.path))


@router.get(
    "/{contact_id}",
    response_model=Contact,
    responses={404: {"description": "Contact not found"}},
)
async def get_contact(request: Request, contact_id: int) -> Contact:
    contact = _service(request).view_contact(contact_id)
    if contact is None:
        raise _not_found(contact_id)
    return contact


@router.put(
    "/{contact_id}",
    response_model=Contact,
    responses={
        400: {"description": "Invalid contact fields"},
        404: {"description": "Contact not found"},
        409: {"description": "Email already in use"},
    },
)
async def update_contact(
    request: Request, contact_id: int, body: ContactUpdate
) -> Contact:
    """Edit a contact. Fields omitted from the body keep their value.

    Args:
        request: FastAPI request (provides access to app state).
        contact_id: Contact to edit.
        body: New values for any of name, email and phone.

    Returns:
        The contact after the edit.

    Raises:
        HTTPException: 404 if unknown, 400 on invalid fields, 409 if the
            email belongs to another contact.
    """
    service = _service(request)
    existing = service.view_contact(contact_id)
    if existing is None:
        raise _not_found(contact_id)

    changes = body.model_dump(exclude_none=True)
    candidate = existing.model_copy(update=changes)

    try:
        updated = service.edit_contact(candidate)
    except ContactValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ContactConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    if not updated:
        raise _not_found(contact_id)
    return service.view_contact(contact_id) or candidate


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Contact not found"}},
)
async def delete_contact(request: Request, contact_id: int) -> Response:
    if not _service(request).remove_contact(contact_id):
        raise _not_found(contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
