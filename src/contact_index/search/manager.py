"""Synchronized id, email and name indexes over the contact set."""

import random
from collections.abc import Iterable

import structlog

from contact_index.contacts.schemas import Contact
from contact_index.search.index import SearchIndex

logger = structlog.get_logger()

DEFAULT_ID_MIN = 1
DEFAULT_ID_MAX = 1_000_000
DEFAULT_ID_MAX_ATTEMPTS = 1000


def _copy(contact: Contact | None) -> Contact | None:
    return contact.model_copy() if contact is not None else None


class DuplicateContactError(Exception):
    """Raised when a mutation would break id or email uniqueness."""

    def __init__(self, message: str, contact_id: int, email: str) -> None:
        """Initialize duplicate contact error.

        Args:
            message: Error description.
            contact_id: Id of the contact being written.
            email: Email of the contact being written.
        """
        super().__init__(message)
        self.contact_id = contact_id
        self.email = email


class IdSpaceExhaustedError(Exception):
    """Raised when no free identifier could be drawn."""


class IndexManager:
    """Owns every lookup structure over the stored contacts.

    Three views are kept in step: id to contact, email to contact, and
    a SearchIndex over lower-cased names. All mutation goes through
    this class; the sub-indexes are never handed out. Contacts are
    copied on the way in and on the way out, so callers never hold an
    indexed instance.

    Not thread-safe. Callers sharing a manager across threads must
    serialize access themselves.
    """

    def __init__(
        self,
        id_min: int = DEFAULT_ID_MIN,
        id_max: int = DEFAULT_ID_MAX,
        max_attempts: int = DEFAULT_ID_MAX_ATTEMPTS,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize empty indexes.

        Args:
            id_min: Smallest identifier generate_next_id may return.
            id_max: Largest identifier generate_next_id may return.
            max_attempts: Sampling attempts before giving up on an id.
            rng: Random source, seeded by the caller for reproducibility.

        Raises:
            ValueError: If the id range is empty or max_attempts < 1.
        """
        if id_min > id_max:
            raise ValueError(f"Empty id range [{id_min}, {id_max}]")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._id_min = id_min
        self._id_max = id_max
        self._max_attempts = max_attempts
        self._rng = rng or random.Random()

        self._by_id: dict[int, Contact] = {}
        self._by_email: dict[str, Contact] = {}
        self._names = SearchIndex()

    def __len__(self) -> int:
        return len(self._by_id)

    def generate_next_id(self) -> int:
        """Draw an identifier no stored contact currently holds.

        The id is only a candidate: nothing is reserved until the
        contact is actually added.

        Returns:
            A free identifier within the configured range.

        Raises:
            IdSpaceExhaustedError: If the range is full or no free id was
                found within the attempt bound.
        """
        capacity = self._id_max - self._id_min + 1
        if len(self._by_id) >= capacity:
            raise IdSpaceExhaustedError(
                f"All {capacity} ids in [{self._id_min}, {self._id_max}] are taken"
            )

        for _ in range(self._max_attempts):
            candidate = self._rng.randint(self._id_min, self._id_max)
            if candidate not in self._by_id:
                return candidate

        logger.warning(
            "id_generation_exhausted",
            attempts=self._max_attempts,
            stored=len(self._by_id),
            capacity=capacity,
        )
        raise IdSpaceExhaustedError(
            f"No free id found after {self._max_attempts} attempts"
        )

    def build_indexes(self, contacts: Iterable[Contact]) -> None:
        """Replace all indexed state with the given contacts.

        Args:
            contacts: Full contact set, typically loaded from storage.

        Raises:
            DuplicateContactError: If the batch repeats an id or email.
        """
        self._by_id.clear()
        self._by_email.clear()
        self._names.clear()

        for contact in contacts:
            self.add_contact(contact)

        logger.info(
            "indexes_built",
            contact_count=len(self._by_id),
            name_entries=len(self._names),
        )

    def add_contact(self, contact: Contact) -> None:
        """Insert a contact into every view.

        Args:
            contact: Contact with its id already assigned.

        Raises:
            DuplicateContactError: If the id or email is already stored.
                No view is modified in that case.
        """
        if contact.id in self._by_id:
            raise DuplicateContactError(
                f"Contact id {contact.id} already exists",
                contact.id,
                contact.email,
            )
        if contact.email in self._by_email:
            raise DuplicateContactError(
                f"Email {contact.email!r} already belongs to another contact",
                contact.id,
                contact.email,
            )

        stored = contact.model_copy()
        self._by_id[stored.id] = stored
        self._by_email[stored.email] = stored
        self._names.insert(stored.name, stored.id)

    def update_contact(self, updated: Contact) -> bool:
        """Apply new field values to a stored contact.

        The old email mapping and name entry are removed before the new
        ones are written. The stored id and created_at never change.

        Args:
            updated: Contact carrying the target id and the new values.

        Returns:
            True if the contact existed and was updated, False otherwise.

        Raises:
            DuplicateContactError: If the new email belongs to a different
                contact. No view is modified in that case.
        """
        existing = self._by_id.get(updated.id)
        if existing is None:
            return False

        holder = self._by_email.get(updated.email)
        if holder is not None and holder.id != existing.id:
            raise DuplicateContactError(
                f"Email {updated.email!r} already belongs to another contact",
                updated.id,
                updated.email,
            )

        old_email = existing.email
        old_name = existing.name
        self._by_email.pop(old_email, None)
        self._names.remove(old_name, existing.id)

        existing.name = updated.name
        existing.email = updated.email
        existing.phone = updated.phone

        self._by_email[existing.email] = existing
        self._names.insert(existing.name, existing.id)
        return True

    def remove_contact(self, contact_id: int) -> bool:
        """Erase a contact from every view.

        Args:
            contact_id: Identifier of the contact to remove.

        Returns:
            True if the contact existed, False otherwise.
        """
        contact = self._by_id.get(contact_id)
        if contact is None:
            return False

        self._by_email.pop(contact.email, None)
        self._names.remove(contact.name, contact_id)
        del self._by_id[contact_id]
        return True

    def get_by_id(self, contact_id: int) -> Contact | None:
        return _copy(self._by_id.get(contact_id))

    def get_by_email(self, email: str) -> Contact | None:
        return _copy(self._by_email.get(email))

    def email_exists(self, email: str) -> bool:
        return email in self._by_email

    def get_all_contacts(self) -> list[Contact]:
        """Return every stored contact in no particular order."""
        return [contact.model_copy() for contact in self._by_id.values()]

    def search_by_prefix(self, text: str) -> list[Contact]:
        """Find contacts whose name starts with the given text.

        Ids with no stored contact are skipped.

        Args:
            text: Name prefix, any case.

        Returns:
            Matching contacts in no particular order.
        """
        results: list[Contact] = []
        for contact_id in self._names.search_prefix(text):
            contact = self._by_id.get(contact_id)
            if contact is not None:
                results.append(contact.model_copy())
        return results
