"""Pytest configuration and fixtures."""

import sys
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from contact_index.app import create_app
from contact_index.config import Settings
from contact_index.contacts.schemas import Contact

ContactFactory = Callable[..., Contact]


@pytest.fixture
def data_path(tmp_path: Path) -> Path:
    """Contact file location inside a per-test directory."""
    return tmp_path / "data" / "contacts.json"


@pytest.fixture
def settings(data_path: Path) -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=True,
        data_path=data_path,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Create test client with the lifespan running."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_contact() -> ContactFactory:
    """Build contacts with sensible defaults for the unset fields."""

    def factory(
        contact_id: int,
        name: str,
        email: str | None = None,
        phone: str = "555-0100",
        created_at: datetime | None = None,
    ) -> Contact:
        return Contact(
            id=contact_id,
            name=name,
            email=email or f"user{contact_id}@example.com",
            phone=phone,
            created_at=created_at or datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc),
        )

    return factory
