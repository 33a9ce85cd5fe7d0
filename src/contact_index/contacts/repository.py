"""JSON file repository for the persisted contact set."""

import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from contact_index.contacts.schemas import Contact

logger = structlog.get_logger()

_CONTACT_LIST = TypeAdapter(list[Contact])


class RepositoryError(Exception):
    """Raised when the contact file cannot be read or written."""

    def __init__(self, message: str, path: str) -> None:
        """Initialize repository error.

        Args:
            message: Error description.
            path: Path of the contact file.
        """
        super().__init__(message)
        self.path = path


class JsonContactRepository:
    """Loads and saves the whole contact set as one JSON array.

    Both operations are all-or-nothing batches; the file is never
    touched between them.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize repository.

        Args:
            path: Location of the JSON contact file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> list[Contact]:
        """Read every stored contact.

        Returns:
            Contacts in file order, or an empty list if the file is missing.

        Raises:
            RepositoryError: If the file is unreadable or malformed.
        """
        if not self._path.exists():
            logger.info("contact_file_not_found", path=str(self._path))
            return []

        try:
            raw = self._path.read_bytes()
        except OSError as e:
            raise RepositoryError(
                f"Failed to read contact file: {e}", str(self._path)
            ) from e

        if not raw.strip():
            return []

        try:
            contacts = _CONTACT_LIST.validate_json(raw)
        except ValidationError as e:
            raise RepositoryError(
                f"Invalid contact file {self._path}: {e.error_count()} error(s)",
                str(self._path),
            ) from e

        logger.info("contacts_loaded", path=str(self._path), count=len(contacts))
        return contacts

    def save_all(self, contacts: Iterable[Contact]) -> int:
        """Atomically replace the file with the given contacts.

        Args:
            contacts: Full contact set to persist.

        Returns:
            Number of contacts written.

        Raises:
            RepositoryError: If the file cannot be written.
        """
        batch = list(contacts)
        payload = _CONTACT_LIST.dump_json(batch, indent=2)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.stem}-",
                suffix=".tmp",
            )
        except OSError as e:
            raise RepositoryError(
                f"Failed to prepare contact file: {e}", str(self._path)
            ) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(temp_path, self._path)
        except OSError as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise RepositoryError(
                f"Failed to write contact file: {e}", str(self._path)
            ) from e

        logger.info("contacts_saved", path=str(self._path), count=len(batch))
        return len(batch)
