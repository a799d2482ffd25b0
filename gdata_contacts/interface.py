"""
Contacts Client Interface

Core types shared by the codecs and the service, plus the transport
abstraction. Transports implement ContactsTransport to carry requests to the
contacts feed (google-auth session, test doubles, etc.).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


class EntryMode(Enum):
    """How a contact entry is being written."""
    SINGLE = "single"
    BATCH_INSERT = "batch_insert"
    BATCH_UPDATE = "batch_update"


class BatchOperationType(Enum):
    """Batch operation kinds understood by the feed."""
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def unique_values(values: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return tuple(seen)


@dataclass(frozen=True)
class Contact:
    """A contact record as carried by the feed."""
    title: str = ""
    email_address: str = ""
    phone_number: str = ""
    photo_uri: str = ""
    groups: Tuple[str, ...] = ()
    id: Optional[str] = None
    forename: Optional[str] = None
    surname: Optional[str] = None

    def __post_init__(self):
        groups = self.groups or ()
        if isinstance(groups, str):
            groups = (groups,)
        object.__setattr__(self, "groups", unique_values(groups))

    @classmethod
    def new(
        cls,
        forename: str,
        surname: str,
        email_address: str = "",
        phone_number: Optional[str] = None,
        groups: Iterable[str] = (),
        id: Optional[str] = None
    ) -> "Contact":
        """Build a contact for writing from its name parts."""
        return cls(
            title=f"{forename} {surname}",
            email_address=email_address or "",
            phone_number=phone_number or "",
            groups=(groups,) if isinstance(groups, str) else tuple(groups),
            id=id,
            forename=forename,
            surname=surname
        )

    @property
    def full_name(self) -> str:
        """Name written to the entry title."""
        if self.forename is not None or self.surname is not None:
            return f"{self.forename or ''} {self.surname or ''}"
        return self.title


@dataclass(frozen=True)
class BatchOperation:
    """One insert, update or delete inside a batch envelope."""
    type: BatchOperationType
    contact: Optional[Contact] = None
    contact_id: Optional[str] = None

    def __post_init__(self):
        if self.type is BatchOperationType.DELETE:
            if not self.target_id:
                raise ValueError("delete operations need a contact id")
            return
        if self.contact is None:
            raise ValueError(f"{self.type.value} operations need a contact")
        if self.type is BatchOperationType.UPDATE and not self.contact.id:
            raise ValueError("update operations need a contact with an id")

    @property
    def target_id(self) -> Optional[str]:
        if self.contact_id:
            return self.contact_id
        return self.contact.id if self.contact else None

    @property
    def label(self) -> str:
        return self.type.value

    @classmethod
    def insert(cls, contact: Contact) -> "BatchOperation":
        return cls(BatchOperationType.INSERT, contact=contact)

    @classmethod
    def update(cls, contact: Contact) -> "BatchOperation":
        return cls(BatchOperationType.UPDATE, contact=contact)

    @classmethod
    def delete(cls, contact_id: str) -> "BatchOperation":
        return cls(BatchOperationType.DELETE, contact_id=contact_id)


@dataclass
class TransportResponse:
    """Raw HTTP response handed back by a transport."""
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass
class ContactsAccount:
    """A named contacts account configuration."""
    name: str
    token_path: str
    feed_url: str
    config: Dict[str, Any] = field(default_factory=dict)


class ContactsTransport(ABC):
    """Authorized HTTP capability used by ContactService."""

    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None
    ) -> TransportResponse:
        """
        Send one HTTP request.

        Args:
            method: GET, POST, PUT or DELETE
            url: Absolute URL
            headers: Extra request headers
            body: Request body, if any

        Returns:
            The response, whatever its status

        Raises:
            TransportError: If no response could be obtained
        """
        pass

    def close(self) -> None:
        """Release any pooled connections."""
        pass
