"""Contact operations with validation, uniqueness checks and persistence."""

import threading
from datetime import datetime, timezone

import structlog

from contact_index.contacts.filters import ContactPredicate
from contact_index.contacts.repository import JsonContactRepository
from contact_index.contacts.schemas import Contact
from contact_index.search.manager import DuplicateContactError, IndexManager

logger = structlog.get_logger()


class ContactError(Exception):
    """Base class for contact service errors."""


class ContactValidationError(ContactError):
    """Raised when a contact has missing or malformed fields."""

    def __init__(self, message: str, field: str) -> None:
        """Initialize validation error.

        Args:
            message: Error description.
            field: Name of the offending field.
        """
        super().__init__(message)
        self.field = field


class ContactConflictError(ContactError):
    """Raised when an email is already used by another contact."""

    def __init__(self, message: str, email: str) -> None:
        """Initialize conflict error.

        Args:
            message: Error description.
            email: The conflicting email address.
        """
        super().__init__(message)
        self.email = email


def validate_contact(contact: Contact) -> None:
    """Check required fields and email shape.

    Args:
        contact: Contact to validate.

    Raises:
        ContactValidationError: On the first failing field.
    """
    if not contact.name.strip():
        raise ContactValidationError("Name cannot be empty.", "name")
    if not contact.email.strip():
        raise ContactValidationError("Email cannot be empty.", "email")
    if "@" not in contact.email or "." not in contact.email:
        raise ContactValidationError(
            "Email format is invalid. Must contain '@' and '.'.", "email"
        )
    if not contact.phone.strip():
        raise ContactValidationError("Phone cannot be empty.", "phone")


class ContactService:
    """Application-level contact operations over an IndexManager.

    Every public method holds a single lock, so one service instance
    can be shared by request handlers running on different threads.
    """

    def __init__(
        self,
        repository: JsonContactRepository,
        manager: IndexManager | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Source and sink for the persisted contact set.
            manager: Index manager to drive. Creates a default if None.
        """
        self._repository = repository
        self._manager = manager if manager is not None else IndexManager()
        self._lock = threading.Lock()
        self._initialized = False

    @property
    def repository(self) -> JsonContactRepository:
        return self._repository

    @property
    def is_initialized(self) -> bool:
        """Whether initialize() has completed."""
        return self._initialized

    def initialize(self) -> int:
        """Load persisted contacts and build every index.

        Returns:
            Number of contacts loaded.

        Raises:
            RepositoryError: If the contact file cannot be read.
            DuplicateContactError: If the file repeats an id or email.
        """
        contacts = self._repository.load_all()
        with self._lock:
            self._manager.build_indexes(contacts)
            self._initialized = True
            count = len(self._manager)

        if count:
            logger.info("contacts_initialized", count=count)
        else:
            logger.info("contacts_initialized_empty")
        return count

    def generate_next_id(self) -> int:
        with self._lock:
            return self._manager.generate_next_id()

    def create_contact(self, name: str, email: str, phone: str) -> Contact:
        """Build a contact with a fresh id and add it.

        Args:
            name: Contact name.
            email: Contact email, must be unused.
            phone: Contact phone number.

        Returns:
            The stored contact.

        Raises:
            ContactValidationError: If a field is empty or malformed.
            ContactConflictError: If the email is taken.
            IdSpaceExhaustedError: If no free id is available.
        """
        with self._lock:
            contact = Contact(
                id=self._manager.generate_next_id(),
                name=name,
                email=email,
                phone=phone,
                created_at=datetime.now(timezone.utc),
            )
            self._add_locked(contact)
        return contact

    def add_contact(self, contact: Contact) -> None:
        """Validate and store a contact whose id is already set.

        Raises:
            ContactValidationError: If a field is empty or malformed.
            ContactConflictError: If the email or id is taken.
        """
        with self._lock:
            self._add_locked(contact)

    def _add_locked(self, contact: Contact) -> None:
        validate_contact(contact)

        if self._manager.email_exists(contact.email):
            raise ContactConflictError(
                "A contact with this email already exists.", contact.email
            )

        try:
            self._manager.add_contact(contact)
        except DuplicateContactError as e:
            raise ContactConflictError(str(e), contact.email) from e

        logger.info("contact_added", contact_id=contact.id)

    def edit_contact(self, contact: Contact) -> bool:
        """Validate and apply new values to an existing contact.

        Args:
            contact: Target id plus the new name, email and phone.

        Returns:
            True if the contact existed, False otherwise.

        Raises:
            ContactValidationError: If a field is empty or malformed.
            ContactConflictError: If another contact uses the new email.
        """
        validate_contact(contact)

        with self._lock:
            holder = self._manager.get_by_email(contact.email)
            if holder is not None and holder.id != contact.id:
                raise ContactConflictError(
                    "Another contact already uses this email.", contact.email
                )

            updated = self._manager.update_contact(contact)

        if updated:
            logger.info("contact_updated", contact_id=contact.id)
        return updated

    def remove_contact(self, contact_id: int) -> bool:
        with self._lock:
            removed = self._manager.remove_contact(contact_id)

        if removed:
            logger.info("contact_removed", contact_id=contact_id)
        return removed

    def view_contact(self, contact_id: int) -> Contact | None:
        with self._lock:
            return self._manager.get_by_id(contact_id)

    def find_by_email(self, email: str) -> Contact | None:
        with self._lock:
            return self._manager.get_by_email(email)

    def list_contacts(self) -> list[Contact]:
        with self._lock:
            return self._manager.get_all_contacts()

    def search_contacts(self, prefix: str) -> list[Contact]:
        """Find contacts whose name starts with prefix, ignoring case."""
        with self._lock:
            return self._manager.search_by_prefix(prefix)

    def filter_contacts(self, predicate: ContactPredicate) -> list[Contact]:
        """Return contacts for which the predicate holds.

        Args:
            predicate: Callable evaluated once per stored contact.

        Returns:
            Matching contacts in no particular order.
        """
        with self._lock:
            contacts = self._manager.get_all_contacts()
        return [contact for contact in contacts if predicate(contact)]

    def save_changes(self) -> int:
        """Persist a snapshot of the current contact set.

        The snapshot is taken under the lock; the file is written
        after it is released.

        Returns:
            Number of contacts written.

        Raises:
            RepositoryError: If the contact file cannot be written.
        """
        with self._lock:
            snapshot = self._manager.get_all_contacts()
        return self._repository.save_all(snapshot)
