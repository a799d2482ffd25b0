"""
Contact Entry Codec

Converts Contact values to and from Atom/GData entry XML.

Encoding composes one builder function per element kind. Decoding reads the
handful of fields the feed exposes (id, title, email, phone, edit-photo link,
group memberships) and ignores everything else.
"""

import logging
from typing import Iterable, List, Optional, Union

from lxml import etree

from .errors import ParseError
from .interface import Contact, EntryMode, unique_values

logger = logging.getLogger(__name__)

# Namespaces
ATOM_NS = "http://www.w3.org/2005/Atom"
GD_NS = "http://schemas.google.com/g/2005"
GCONTACT_NS = "http://schemas.google.com/contact/2008"
BATCH_NS = "http://schemas.google.com/gdata/batch"

ENTRY_NSMAP = {None: ATOM_NS, "gd": GD_NS, "gContact": GCONTACT_NS}
BATCH_NSMAP = {None: ATOM_NS, "gd": GD_NS, "gContact": GCONTACT_NS, "batch": BATCH_NS}

# Qualified tags
ATOM_FEED = f"{{{ATOM_NS}}}feed"
ATOM_ENTRY = f"{{{ATOM_NS}}}entry"
ATOM_ID = f"{{{ATOM_NS}}}id"
ATOM_TITLE = f"{{{ATOM_NS}}}title"
ATOM_CATEGORY = f"{{{ATOM_NS}}}category"
ATOM_LINK = f"{{{ATOM_NS}}}link"
GD_ANY = f"{{{GD_NS}}}*"
GD_EMAIL = f"{{{GD_NS}}}email"
GD_PHONE = f"{{{GD_NS}}}phoneNumber"
GD_ETAG = f"{{{GD_NS}}}etag"
GCONTACT_GROUP = f"{{{GCONTACT_NS}}}groupMembershipInfo"
BATCH_ID = f"{{{BATCH_NS}}}id"
BATCH_OPERATION = f"{{{BATCH_NS}}}operation"

# Fixed attribute values
KIND_SCHEME = "http://schemas.google.com/g/2005#kind"
CONTACT_KIND = "http://schemas.google.com/g/2008#contact"
REL_WORK = "http://schemas.google.com/g/2005#work"
REL_HOME = "http://schemas.google.com/g/2005#home"
EDIT_PHOTO_REL = "http://schemas.google.com/contacts/2008/rel#edit-photo"
ETAG_WILDCARD = "*"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)

XmlInput = Union[bytes, str, etree._Element]


# =============================================================================
# ELEMENT BUILDERS
# =============================================================================

def category_element(parent: etree._Element) -> etree._Element:
    """Contact-kind category; exactly one per entry."""
    return etree.SubElement(parent, ATOM_CATEGORY, {"scheme": KIND_SCHEME, "term": CONTACT_KIND})


def id_element(parent: etree._Element, contact_id: str) -> etree._Element:
    node = etree.SubElement(parent, ATOM_ID)
    node.text = contact_id
    return node


def title_element(parent: etree._Element, title: str) -> etree._Element:
    node = etree.SubElement(parent, ATOM_TITLE)
    node.text = title
    return node


def email_element(
    parent: etree._Element,
    address: str,
    rel: str,
    primary: bool = False,
    display_name: Optional[str] = None
) -> etree._Element:
    attrib = {"address": address}
    if primary:
        attrib["primary"] = "true"
    if display_name:
        attrib["displayName"] = display_name
    attrib["rel"] = rel
    return etree.SubElement(parent, GD_EMAIL, attrib)


def email_pair(parent: etree._Element, address: str, display_name: str) -> None:
    """Primary work email plus a home email carrying the same address."""
    email_element(parent, address, REL_WORK, primary=True, display_name=display_name)
    email_element(parent, address, REL_HOME)


def phone_element(parent: etree._Element, number: str, rel: str = REL_WORK) -> etree._Element:
    node = etree.SubElement(parent, GD_PHONE, {"rel": rel})
    node.text = number
    return node


def group_membership_element(parent: etree._Element, href: str) -> etree._Element:
    return etree.SubElement(parent, GCONTACT_GROUP, {"href": href, "deleted": "false"})


def batch_id_element(parent: etree._Element, label: str) -> etree._Element:
    node = etree.SubElement(parent, BATCH_ID)
    node.text = label
    return node


def batch_operation_element(parent: etree._Element, operation: str) -> etree._Element:
    return etree.SubElement(parent, BATCH_OPERATION, {"type": operation})


def new_entry(parent: Optional[etree._Element] = None, nsmap: Optional[dict] = None) -> etree._Element:
    """Start an entry, inside parent when given, else as a root declaring nsmap."""
    if parent is not None:
        return etree.SubElement(parent, ATOM_ENTRY)
    return etree.Element(ATOM_ENTRY, nsmap=nsmap or ENTRY_NSMAP)


# =============================================================================
# ENCODE
# =============================================================================

def encode_entry(
    contact: Contact,
    mode: EntryMode = EntryMode.SINGLE,
    parent: Optional[etree._Element] = None,
    label: Optional[str] = None
) -> etree._Element:
    """
    Build the entry element for a contact.

    Args:
        contact: Contact to write
        mode: single create, batch insert or batch update
        parent: Batch feed to build the entry inside; its namespace
            declarations are reused
        label: batch:id text for batch modes (defaults to the operation name)

    Returns:
        The entry element

    Raises:
        ValueError: If a batch update is requested for a contact without id
    """
    if mode is EntryMode.SINGLE:
        entry = new_entry(parent, ENTRY_NSMAP)
    else:
        entry = new_entry(parent, BATCH_NSMAP)

    if mode is EntryMode.BATCH_UPDATE:
        if not contact.id:
            raise ValueError("batch update needs a contact id")
        entry.set(GD_ETAG, ETAG_WILDCARD)
        id_element(entry, contact.id)
        batch_id_element(entry, label or "update")
        batch_operation_element(entry, "update")
    elif mode is EntryMode.BATCH_INSERT:
        batch_id_element(entry, label or "insert")
        batch_operation_element(entry, "insert")

    category_element(entry)

    full_name = contact.full_name
    title_element(entry, full_name)

    # the feed gets the same address twice, once as work (primary) and once as home,
    # even when it is empty
    email_pair(entry, contact.email_address, full_name)

    if contact.phone_number:
        phone_element(entry, contact.phone_number)

    for group in contact.groups:
        group_membership_element(entry, group)

    return entry


def entry_to_bytes(element: etree._Element) -> bytes:
    """Serialize an entry or feed as a UTF-8 document."""
    return etree.tostring(element, xml_declaration=True, encoding="UTF-8", pretty_print=True)


# =============================================================================
# DECODE
# =============================================================================

def parse_xml(xml: XmlInput) -> etree._Element:
    """Parse a response body into its root element."""
    if isinstance(xml, etree._Element):
        return xml
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    if not xml or not xml.strip():
        raise ParseError("Empty XML document")
    try:
        return etree.fromstring(xml, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"Malformed XML: {e}") from e


def _expect(element: etree._Element, tag: str) -> etree._Element:
    if element.tag != tag:
        raise ParseError(f"Expected {etree.QName(tag).localname} element, got {element.tag}")
    return element


def normalize_phone(value: str) -> str:
    """Strip the tel: scheme and hyphens from a phone value."""
    return value.replace("tel:", "").replace("-", "")


def _contact_details(entry: etree._Element):
    email_address = ""
    phone_number = ""
    for node in entry.iterchildren(GD_ANY):
        name = etree.QName(node).localname
        if name == "email":
            email_address = node.get("address", "")
        elif name == "phoneNumber":
            phone_number = normalize_phone(node.get("uri") or node.text or "")
    return email_address, phone_number


def _photo_uri(entry: etree._Element) -> str:
    photo_uri = ""
    for link in entry.iterchildren(ATOM_LINK):
        if link.get("rel") == EDIT_PHOTO_REL:
            photo_uri = link.get("href", "")
    return photo_uri


def _group_memberships(entry: etree._Element) -> List[str]:
    return [node.get("href", "") for node in entry.iterchildren(GCONTACT_GROUP)]


def decode_entry(xml: XmlInput) -> Contact:
    """
    Read a Contact from an entry document or element.

    Raises:
        ParseError: If the input is malformed or not an Atom entry
    """
    entry = _expect(parse_xml(xml), ATOM_ENTRY)
    email_address, phone_number = _contact_details(entry)

    return Contact(
        id=entry.findtext(ATOM_ID) or None,
        title=entry.findtext(ATOM_TITLE) or "",
        email_address=email_address,
        phone_number=phone_number,
        photo_uri=_photo_uri(entry),
        groups=tuple(_group_memberships(entry))
    )


def decode_feed(xml: XmlInput) -> List[Contact]:
    """Read every entry of a contacts feed."""
    feed = _expect(parse_xml(xml), ATOM_FEED)
    contacts = [decode_entry(entry) for entry in feed.iterchildren(ATOM_ENTRY)]
    logger.debug(f"Decoded {len(contacts)} contacts from feed")
    return contacts


# =============================================================================
# IN-PLACE UPDATE
# =============================================================================

def apply_update(
    raw_entry: XmlInput,
    title: str,
    email_address: str,
    phone_number: Optional[str],
    groups: Iterable[str] = ()
) -> bytes:
    """
    Rewrite a fetched entry for a full-record PUT.

    Title and email/phone values are overwritten where they stand, and the
    work/home email pair or the phone element is appended when missing. Every
    existing group membership is dropped and replaced by ``groups``.
    Everything else in the entry (links, etag, unknown extensions) is sent
    back untouched.

    Returns:
        The updated entry document
    """
    entry = _expect(parse_xml(raw_entry), ATOM_ENTRY)
    email_address = email_address or ""

    title_node = entry.find(ATOM_TITLE)
    if title_node is None:
        title_element(entry, title)
    else:
        title_node.text = title

    email_seen = False
    phone_seen = False
    for node in entry.iterchildren(GD_ANY):
        name = etree.QName(node).localname
        if name == "email":
            email_seen = True
            node.set("address", email_address)
        elif name == "phoneNumber" and phone_number:
            phone_seen = True
            node.text = phone_number
            if node.get("uri") is not None:
                node.set("uri", f"tel:{phone_number}")

    if not email_seen:
        email_pair(entry, email_address, title)
    if phone_number and not phone_seen:
        phone_element(entry, phone_number)

    for node in list(entry.iterchildren(GCONTACT_GROUP)):
        entry.remove(node)
    for group in unique_values(groups):
        group_membership_element(entry, group)

    return entry_to_bytes(entry)
