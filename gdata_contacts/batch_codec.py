"""
Batch Envelope Codec

Bundles insert/update/delete operations into one feed document for the
contacts batch endpoint.

The batch response is handed back as text. Per-entry batch:status elements
are not interpreted; callers that need per-item results parse the returned
document themselves.
"""

import logging
from typing import Iterable, Union

from lxml import etree

from .entry_codec import (
    ATOM_FEED, BATCH_NSMAP, ETAG_WILDCARD, GD_ETAG,
    batch_id_element, batch_operation_element, encode_entry, id_element, new_entry
)
from .interface import BatchOperation, BatchOperationType, EntryMode

logger = logging.getLogger(__name__)

_ENTRY_MODES = {
    BatchOperationType.INSERT: EntryMode.BATCH_INSERT,
    BatchOperationType.UPDATE: EntryMode.BATCH_UPDATE,
}


def batch_feed() -> etree._Element:
    """Envelope declaring the Atom, gd, gContact and batch namespaces."""
    return etree.Element(ATOM_FEED, nsmap=BATCH_NSMAP)


def delete_entry(feed: etree._Element, contact_id: str) -> etree._Element:
    entry = new_entry(feed)
    entry.set(GD_ETAG, ETAG_WILDCARD)
    batch_id_element(entry, "delete")
    batch_operation_element(entry, "delete")
    id_element(entry, contact_id)
    return entry


def encode_batch(operations: Iterable[BatchOperation]) -> etree._Element:
    """
    Build the batch feed for a sequence of operations, in order.

    Raises:
        ValueError: If there are no operations
    """
    feed = batch_feed()
    count = 0
    for operation in operations:
        if operation.type is BatchOperationType.DELETE:
            delete_entry(feed, operation.target_id)
        else:
            encode_entry(
                operation.contact,
                _ENTRY_MODES[operation.type],
                parent=feed,
                label=operation.label
            )
        count += 1

    if not count:
        raise ValueError("A batch needs at least one operation")

    logger.debug(f"Encoded batch with {count} operations")
    return feed


def batch_to_bytes(feed: etree._Element) -> bytes:
    return etree.tostring(feed, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def decode_batch_response(raw: Union[bytes, str]) -> str:
    """Return the aggregate batch response body as text."""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw
