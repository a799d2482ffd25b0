"""
Contact Service

Public contacts operations on top of an injected ContactsTransport.

Each call is one HTTP exchange (update is a GET followed by a PUT). Writes
send ``If-Match: *``, so updates and deletes never fail on a stale etag and
concurrent edits made elsewhere are silently overwritten.
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from .batch_codec import batch_to_bytes, decode_batch_response, encode_batch
from .config import BATCH_SUFFIX, DEFAULT_FEED_URL, DEFAULT_MAX_RESULTS, FULL_TEXT_PROTOCOL_VERSION
from .entry_codec import apply_update, decode_entry, decode_feed, encode_entry, entry_to_bytes
from .errors import ProtocolError
from .interface import (
    BatchOperation, Contact, ContactsTransport, EntryMode, TransportResponse
)
from .query import ContactQuery

logger = logging.getLogger(__name__)

ATOM_ENTRY_CONTENT_TYPE = "application/atom+xml; charset=UTF-8; type=entry"


class ContactService:
    """Contacts feed client."""

    def __init__(
        self,
        transport: ContactsTransport,
        feed_url: str = DEFAULT_FEED_URL,
        query: Optional[ContactQuery] = None
    ):
        self.transport = transport
        self.feed_url = feed_url.rstrip("/")
        self.query = query or ContactQuery()

    @property
    def batch_url(self) -> str:
        return self.feed_url + BATCH_SUFFIX

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _headers(self, write: bool = False, if_match: bool = False,
                 version: Optional[str] = None) -> Dict[str, str]:
        headers = {}
        version = version or self.query.protocol_version
        if version:
            headers["GData-Version"] = version
        if write:
            headers["Content-Type"] = ATOM_ENTRY_CONTENT_TYPE
        if if_match:
            headers["If-Match"] = "*"
        return headers

    def _send(self, method: str, url: str, headers: Dict[str, str],
              body: Optional[bytes] = None) -> TransportResponse:
        logger.debug(f"{method} {url}")
        response = self.transport.request(method, url, headers=headers, body=body)
        if not response.ok:
            logger.warning(f"{method} {url} failed with HTTP {response.status}")
            raise ProtocolError(response.status, response.text, url)
        return response

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def _fetch_feed(self, query: ContactQuery) -> List[Contact]:
        url = query.build(self.feed_url)
        response = self._send("GET", url, self._headers(version=query.protocol_version))
        return decode_feed(response.body)

    def list_contacts(self, max_results: int = DEFAULT_MAX_RESULTS) -> List[Contact]:
        """
        Fetch the contacts feed with the configured query parameters.

        ``max_results`` applies to this call only; ``self.query`` is left as is.
        """
        return self._fetch_feed(self.query.copy().with_max_results(max_results))

    def search_contacts(self, terms: Union[str, Iterable[str]],
                        max_results: int = DEFAULT_MAX_RESULTS) -> List[Contact]:
        """Full-text search; the terms apply to this call only."""
        query = self.query.copy().with_search_terms(terms).with_max_results(max_results)
        return self._fetch_feed(query)

    def get_contact_raw(self, contact_id: str) -> bytes:
        """Fetch the entry document for a contact id, unparsed."""
        return self._send("GET", contact_id, self._headers()).body

    def get_contact(self, contact_id: str) -> Contact:
        return decode_entry(self.get_contact_raw(contact_id))

    def get_photo(self, photo_uri: str) -> bytes:
        """Download the photo behind a contact's edit-photo link."""
        return self._send("GET", photo_uri, self._headers()).body

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def create_contact(
        self,
        forename: str,
        surname: str,
        email_address: str,
        phone_number: Optional[str] = None,
        groups: Iterable[str] = ()
    ) -> Contact:
        """
        Create a contact.

        Returns:
            The contact as stored by the server, including its new id

        Raises:
            ProtocolError: If the server rejects the entry
        """
        contact = Contact.new(forename, surname, email_address, phone_number, groups)
        body = entry_to_bytes(encode_entry(contact, EntryMode.SINGLE))

        response = self._send("POST", self.query.build(self.feed_url),
                              self._headers(write=True), body)
        created = decode_entry(response.body)
        logger.info(f"✅ Created contact: {created.title} ({created.id})")
        return created

    def update_contact(
        self,
        contact_id: str,
        forename: str,
        surname: str,
        email_address: str,
        phone_number: Optional[str] = None,
        groups: Iterable[str] = ()
    ) -> Contact:
        """
        Overwrite a contact's name, email, phone and groups.

        ``groups`` is the complete set of memberships the contact should end
        up with; any group not listed is removed.
        """
        raw = self.get_contact_raw(contact_id)
        body = apply_update(raw, f"{forename} {surname}", email_address, phone_number, groups)

        response = self._send("PUT", contact_id,
                              self._headers(write=True, if_match=True), body)
        logger.info(f"✅ Updated contact: {contact_id}")
        if response.body.strip():
            return decode_entry(response.body)
        return decode_entry(body)

    def delete_contact(self, contact_id: str) -> None:
        self._send("DELETE", contact_id, self._headers(if_match=True))
        logger.info(f"✅ Deleted contact: {contact_id}")

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    def batch(self, operations: Iterable[BatchOperation],
              version: Optional[str] = None) -> str:
        """
        Submit operations as one batch request.

        Returns:
            The raw batch response document
        """
        operations = list(operations)
        body = batch_to_bytes(encode_batch(operations))
        response = self._send(
            "POST", self.batch_url,
            self._headers(write=True, if_match=True, version=version),
            body
        )
        logger.info(f"✅ Submitted batch of {len(operations)} operations")
        return decode_batch_response(response.body)

    def batch_create_contacts(self, contacts: Iterable[Contact]) -> str:
        return self.batch(BatchOperation.insert(contact) for contact in contacts)

    def batch_update_contacts(self, contacts: Iterable[Contact]) -> str:
        return self.batch(
            (BatchOperation.update(contact) for contact in contacts),
            version=FULL_TEXT_PROTOCOL_VERSION
        )

    def batch_delete_contacts(self, contact_ids: Iterable[str]) -> str:
        return self.batch(BatchOperation.delete(contact_id) for contact_id in contact_ids)

    def close(self) -> None:
        self.transport.close()
