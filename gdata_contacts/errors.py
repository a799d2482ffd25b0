"""
Contacts Client Errors

Every failure raised by the codecs, the service and the bundled transport
derives from ContactsError so callers can catch one type.
"""

from typing import Optional


class ContactsError(Exception):
    """Base class for contacts client failures."""


class TransportError(ContactsError):
    """The HTTP exchange itself failed (connection, DNS, timeout, auth refresh)."""


class ParseError(ContactsError):
    """A response body was not well-formed XML or not the expected element."""


class ProtocolError(ContactsError):
    """The server answered with an error status."""

    def __init__(self, status: int, body: str = "", url: Optional[str] = None):
        self.status = status
        self.body = body
        self.url = url
        message = f"HTTP {status}"
        if url:
            message += f" for {url}"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)
