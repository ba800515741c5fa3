"""
Contact directory used by the legacy launcher.
"""

from typing import Dict, Iterable, Optional, Protocol, Any
import structlog

from .errors import InvalidIdentifier
from .models import Contact

logger = structlog.get_logger(__name__)


class ContactDirectory(Protocol):
    def latest_contact_for(self, identifier: str) -> Optional[Contact]:
        ...


class InMemoryContactDirectory:
    """Contacts keyed by canonical identifier."""

    def __init__(self, contacts: Optional[Iterable[Contact]] = None):
        self._contacts: Dict[str, Contact] = {}
        for contact in contacts or ():
            self.add(contact)

    @classmethod
    def from_config(cls, entries: Iterable[Any], resolver=None) -> "InMemoryContactDirectory":
        """
        Build a directory from config entries (dicts or ContactEntry models).

        When a resolver is given, entry identifiers are normalized with it so
        the YAML may use human formatting. Unparseable entries are skipped.
        """
        directory = cls()
        for entry in entries or ():
            data = entry if isinstance(entry, dict) else entry.model_dump()
            identifier = str(data.get("identifier", "")).strip()
            if resolver is not None:
                try:
                    identifier = resolver.resolve(identifier)
                except InvalidIdentifier as exc:
                    logger.warning("Skipping contact with invalid identifier", identifier=identifier, error=str(exc))
                    continue
            directory.add(Contact(
                identifier=str(identifier),
                display_name=data.get("display_name") or str(identifier),
                endpoint=data.get("endpoint"),
            ))
        logger.debug("Loaded contact directory", count=len(directory))
        return directory

    def add(self, contact: Contact) -> None:
        self._contacts[contact.identifier] = contact

    def latest_contact_for(self, identifier: str) -> Optional[Contact]:
        return self._contacts.get(str(identifier))

    def __len__(self) -> int:
        return len(self._contacts)
