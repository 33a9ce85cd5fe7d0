"""Health check endpoints for liveness and readiness probes."""
import os
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness probe.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessCheck(BaseModel):
    """Individual dependency check result.

    Attributes:
        name: Identifier for the dependency being checked.
        status: Result of the check ('ok' or 'failed').
        message: Error details when status is 'failed'.
    """

    name: str
    status: Literal["ok", "failed"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Response model for readiness probe.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]


def _check_index(request: Request) -> ReadinessCheck:
    """Verify the contact indexes were built at startup."""
    service = getattr(request.app.state, "contact_service", None)
    if service is not None and service.is_initialized:
        return ReadinessCheck(name="index:contacts", status="ok")
    return ReadinessCheck(
        name="index:contacts",
        status="failed",
        message="Contact indexes not built",
    )


def _check_data_dir(path: Path) -> ReadinessCheck:
    """Verify the directory holding the contact file accepts writes.

    A missing directory passes if its nearest existing ancestor is
    writable, since saving creates it.

    Args:
        path: Contact file path.

    Returns:
        Check result with status and optional error message.
    """
    directory = path.parent.resolve()
    name = f"dir:{directory}"
    probe = directory
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent

    if not probe.is_dir():
        return ReadinessCheck(name=name, status="failed", message="Not a directory")
    if not os.access(probe, os.W_OK):
        return ReadinessCheck(name=name, status="failed", message="Permission denied")
    return ReadinessCheck(name=name, status="ok")


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe endpoint.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Returns 200 when the indexes are built and the data directory is
    writable, 503 otherwise.

    Returns:
        Readiness status with individual check results.
    """
    checks = [
        _check_index(request),
        _check_data_dir(request.app.state.settings.data_path),
    ]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
