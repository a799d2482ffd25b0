"""
GData Contacts

Client for the legacy Google Contacts XML feed:
- query: feed URL parameters
- entry_codec: contact entry XML encode/decode and in-place update
- batch_codec: batch envelope encoder
- service: public operations over an injected transport
- adapters/: transport implementations (google-auth)
"""

from .errors import ContactsError, ParseError, ProtocolError, TransportError
from .interface import (
    BatchOperation, BatchOperationType, Contact, ContactsAccount,
    ContactsTransport, EntryMode, TransportResponse
)
from .query import ContactQuery
from .service import ContactService

__all__ = [
    "BatchOperation", "BatchOperationType", "Contact", "ContactsAccount",
    "ContactsTransport", "EntryMode", "TransportResponse",
    "ContactQuery", "ContactService",
    "ContactsError", "ParseError", "ProtocolError", "TransportError",
]
