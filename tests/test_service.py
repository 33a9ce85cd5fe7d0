"""Contact service tests: validation, conflicts, filtering, persistence."""

import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from contact_index.contacts.filters import created_date_filter
from contact_index.contacts.repository import JsonContactRepository
from contact_index.contacts.schemas import Contact, DateComparison
from contact_index.contacts.service import (
    ContactConflictError,
    ContactError,
    ContactService,
    ContactValidationError,
)
from contact_index.search.manager import IdSpaceExhaustedError, IndexManager

ContactFactory = Callable[..., Contact]


@pytest.fixture
def service(data_path: Path) -> ContactService:
    svc = ContactService(JsonContactRepository(data_path), IndexManager())
    svc.initialize()
    return svc


def test_initialize_loads_persisted_contacts(
    data_path: Path, make_contact: ContactFactory
) -> None:
    JsonContactRepository(data_path).save_all(
        [make_contact(1, "Ann", "a@x.com"), make_contact(2, "Anna", "b@x.com")]
    )
    service = ContactService(JsonContactRepository(data_path))

    assert not service.is_initialized
    assert service.initialize() == 2
    assert service.is_initialized
    assert {c.id for c in service.search_contacts("an")} == {1, 2}
    assert service.find_by_email("b@x.com").id == 2


def test_initialize_without_file(service: ContactService) -> None:
    assert service.is_initialized
    assert service.list_contacts() == []


def test_create_contact_assigns_id(service: ContactService) -> None:
    contact = service.create_contact("Ann", "a@x.com", "555")

    assert contact.id >= 1
    assert contact.created_at.tzinfo is not None
    assert service.view_contact(contact.id) == contact


@pytest.mark.parametrize(
    ("name", "email", "phone", "field"),
    [
        ("", "a@x.com", "555", "name"),
        ("   ", "a@x.com", "555", "name"),
        ("Ann", " ", "555", "email"),
        ("Ann", "ann.example.com", "555", "email"),
        ("Ann", "ann@example", "555", "email"),
        ("Ann", "a@x.com", "", "phone"),
    ],
)
def test_validation_errors(
    service: ContactService, name: str, email: str, phone: str, field: str
) -> None:
    with pytest.raises(ContactValidationError) as exc_info:
        service.create_contact(name, email, phone)

    assert exc_info.value.field == field
    assert service.list_contacts() == []


def test_duplicate_email_on_add(service: ContactService) -> None:
    service.create_contact("Ann", "a@x.com", "555")

    with pytest.raises(ContactConflictError, match="already exists"):
        service.create_contact("Other Ann", "a@x.com", "556")
    assert len(service.list_contacts()) == 1


def test_duplicate_id_on_add(
    service: ContactService, make_contact: ContactFactory
) -> None:
    service.add_contact(make_contact(5, "Ann", "a@x.com"))

    with pytest.raises(ContactConflictError):
        service.add_contact(make_contact(5, "Bob", "b@x.com"))
    assert service.find_by_email("b@x.com") is None


def test_service_errors_share_base() -> None:
    assert issubclass(ContactValidationError, ContactError)
    assert issubclass(ContactConflictError, ContactError)


def test_edit_contact(service: ContactService, make_contact: ContactFactory) -> None:
    service.add_contact(make_contact(1, "Ann", "a@x.com"))

    assert service.edit_contact(make_contact(1, "Bob", "bob@x.com", phone="777"))

    stored = service.view_contact(1)
    assert (stored.name, stored.email, stored.phone) == ("Bob", "bob@x.com", "777")
    assert service.search_contacts("ann") == []
    assert service.find_by_email("a@x.com") is None


def test_edit_to_other_contacts_email(
    service: ContactService, make_contact: ContactFactory
) -> None:
    service.add_contact(make_contact(1, "Ann", "a@x.com"))
    service.add_contact(make_contact(2, "Bob", "b@x.com"))

    with pytest.raises(ContactConflictError, match="Another contact"):
        service.edit_contact(make_contact(1, "Ann", "b@x.com"))
    assert service.view_contact(1).email == "a@x.com"


def test_edit_unknown_contact(
    service: ContactService, make_contact: ContactFactory
) -> None:
    assert service.edit_contact(make_contact(9, "Ann", "a@x.com")) is False


def test_edit_validates(service: ContactService, make_contact: ContactFactory) -> None:
    service.add_contact(make_contact(1, "Ann", "a@x.com"))

    with pytest.raises(ContactValidationError):
        service.edit_contact(make_contact(1, "", "a@x.com"))
    assert service.view_contact(1).name == "Ann"


def test_remove_contact(service: ContactService, make_contact: ContactFactory) -> None:
    service.add_contact(make_contact(1, "Ann", "a@x.com"))

    assert service.remove_contact(1) is True
    assert service.remove_contact(1) is False
    assert service.view_contact(1) is None


def test_filter_contacts(service: ContactService, make_contact: ContactFactory) -> None:
    service.add_contact(
        make_contact(1, "Old", "old@x.com", created_at=datetime(2023, 1, 1, tzinfo=timezone.utc))
    )
    service.add_contact(
        make_contact(2, "New", "new@x.com", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    )

    before = service.filter_contacts(
        created_date_filter(date(2024, 1, 1), DateComparison.BEFORE)
    )
    assert [c.id for c in before] == [1]

    assert {c.id for c in service.filter_contacts(lambda c: c.name.startswith("N"))} == {2}


def test_save_changes_round_trip(data_path: Path, service: ContactService) -> None:
    """Contacts saved by one service are loaded by the next."""
    ann = service.create_contact("Ann", "a@x.com", "555")
    service.create_contact("Bob", "b@x.com", "556")

    assert service.save_changes() == 2

    reloaded = ContactService(JsonContactRepository(data_path))
    reloaded.initialize()
    assert reloaded.view_contact(ann.id) == ann
    assert {c.name for c in reloaded.search_contacts("b")} == {"Bob"}


def test_concurrent_creates_keep_ids_unique(service: ContactService) -> None:
    """The service lock serializes id generation and insertion."""
    errors: list[Exception] = []

    def worker(n: int) -> None:
        try:
            for i in range(25):
                service.create_contact(f"user{n}-{i}", f"u{n}-{i}@x.com", "555")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    contacts = service.list_contacts()
    assert len(contacts) == 100
    assert len({c.id for c in contacts}) == 100
    assert len(service.search_contacts("user")) == 100


def test_injected_manager_is_used(data_path: Path) -> None:
    """An empty manager passed in keeps its id range."""
    manager = IndexManager(id_min=1, id_max=1)
    service = ContactService(JsonContactRepository(data_path), manager)
    service.initialize()

    first = service.create_contact("Ann", "a@x.com", "555")
    assert first.id == 1
    assert len(manager) == 1

    with pytest.raises(IdSpaceExhaustedError):
        service.generate_next_id()
    with pytest.raises(IdSpaceExhaustedError):
        service.create_contact("Bob", "b@x.com", "556")


def test_edit_through_viewed_contact(
    service: ContactService, make_contact: ContactFactory
) -> None:
    service.add_contact(make_contact(1, "Ann", "a@x.com"))

    viewed = service.view_contact(1)
    viewed.name = "Zed"
    assert service.edit_contact(viewed) is True

    assert {c.id for c in service.search_contacts("zed")} == {1}
    assert service.search_contacts("ann") == []


def test_save_does_not_hold_lock_while_writing(
    data_path: Path, make_contact: ContactFactory
) -> None:
    """Reads proceed while the contact file is being written."""
    reads: list[Contact | None] = []

    class ReadingRepository(JsonContactRepository):
        def save_all(self, contacts: Iterable[Contact]) -> int:
            reader = threading.Thread(target=lambda: reads.append(service.view_contact(1)))
            reader.start()
            reader.join(timeout=5)
            assert not reader.is_alive()
            return super().save_all(contacts)

    service = ContactService(ReadingRepository(data_path))
    service.initialize()
    service.add_contact(make_contact(1, "Ann", "a@x.com"))

    assert service.save_changes() == 1
    assert reads[0].name == "Ann"
    assert JsonContactRepository(data_path).load_all()[0].id == 1
