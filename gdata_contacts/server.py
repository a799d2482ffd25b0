"""
Contacts MCP Server

Exposes the contacts feed client as MCP tools:
- Accounts: list, add, remove configured accounts
- Contacts: list, search, get, create, update, delete
- Batch: create, update, delete many contacts in one request
- Photos: download a contact photo
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from fastmcp import FastMCP

from .errors import ContactsError
from .interface import Contact
from .manager import ContactsManager

logger = logging.getLogger(__name__)

mcp = FastMCP("GData Contacts")
manager = ContactsManager()


# =============================================================================
# FORMATTING
# =============================================================================
def format_contact(contact: Contact) -> str:
    lines = [f"👤 {contact.title or '(No name)'}"]
    if contact.id:
        lines.append(f"   ID: {contact.id}")
    if contact.email_address:
        lines.append(f"   📧 {contact.email_address}")
    if contact.phone_number:
        lines.append(f"   📞 {contact.phone_number}")
    if contact.groups:
        lines.append(f"   🏷️  {', '.join(contact.groups)}")
    if contact.photo_uri:
        lines.append(f"   🖼️  {contact.photo_uri}")
    return "\n".join(lines)


def format_contacts(contacts: List[Contact]) -> str:
    if not contacts:
        return "👤 No contacts found"
    header = f"👤 {len(contacts)} contacts\n" + "─" * 40
    return header + "\n" + "\n".join(format_contact(c) for c in contacts)


def run_tool(action: Callable[[], str]) -> str:
    """Run a tool body, turning client failures into an error line."""
    try:
        return action()
    except KeyError as e:
        return f"❌ {e.args[0] if e.args else e}"
    except (ContactsError, ValueError) as e:
        logger.error(f"Contacts tool failed: {e}")
        return f"❌ {e}"


def _contact_from_dict(data: Dict) -> Contact:
    return Contact.new(
        data.get("forename", ""),
        data.get("surname", ""),
        data.get("email", ""),
        data.get("phone"),
        data.get("groups", []),
        id=data.get("id")
    )


# =============================================================================
# ACCOUNT TOOLS
# =============================================================================
@mcp.tool()
def contacts_accounts() -> str:
    """List configured contacts accounts."""
    return manager.list_accounts()


@mcp.tool()
def contacts_account_add(name: str, token_path: str = "", feed_url: str = "") -> str:
    """
    Add a contacts account.

    Args:
        name: Account name used by the other tools
        token_path: Authorized-user token file (default: shared contacts token)
        feed_url: Contacts feed URL (default: the user's full feed)
    """
    return manager.add_account(name, token_path, feed_url)


@mcp.tool()
def contacts_account_remove(name: str) -> str:
    """Remove a contacts account."""
    return manager.remove_account(name)


# =============================================================================
# CONTACT TOOLS
# =============================================================================
@mcp.tool()
def contacts_list(account: str = "default", limit: int = 10000) -> str:
    """
    List contacts.

    Args:
        account: Account name
        limit: Maximum number of contacts (0 for server default)
    """
    return run_tool(lambda: format_contacts(manager.get_service(account).list_contacts(limit)))


@mcp.tool()
def contacts_search(query: str, account: str = "default", limit: int = 10000) -> str:
    """
    Full-text search over contacts.

    Args:
        query: Search words, separated by spaces
        account: Account name
        limit: Maximum number of contacts
    """
    return run_tool(lambda: format_contacts(
        manager.get_service(account).search_contacts(query.split(), limit)
    ))


@mcp.tool()
def contacts_get(contact_id: str, account: str = "default") -> str:
    """Get one contact by its id URL."""
    return run_tool(lambda: format_contact(manager.get_service(account).get_contact(contact_id)))


@mcp.tool()
def contacts_create(
    forename: str,
    surname: str,
    email: str,
    phone: Optional[str] = None,
    groups: Optional[List[str]] = None,
    account: str = "default"
) -> str:
    """
    Create a contact.

    Args:
        forename: Given name
        surname: Family name
        email: Primary email address
        phone: Phone number
        groups: Group id URLs the contact belongs to
        account: Account name
    """
    def create():
        contact = manager.get_service(account).create_contact(
            forename, surname, email, phone, groups or []
        )
        return f"✅ Created contact: {contact.title} (ID: {contact.id})"
    return run_tool(create)


@mcp.tool()
def contacts_update(
    contact_id: str,
    forename: str,
    surname: str,
    email: str,
    phone: Optional[str] = None,
    groups: Optional[List[str]] = None,
    account: str = "default"
) -> str:
    """
    Replace a contact's name, email, phone and groups.

    Args:
        contact_id: Contact id URL
        groups: Complete list of groups; groups not listed are removed
    """
    def update():
        manager.get_service(account).update_contact(
            contact_id, forename, surname, email, phone, groups or []
        )
        return f"✅ Updated contact: {contact_id}"
    return run_tool(update)


@mcp.tool()
def contacts_delete(contact_id: str, account: str = "default") -> str:
    """Delete a contact by its id URL."""
    def delete():
        manager.get_service(account).delete_contact(contact_id)
        return f"✅ Deleted contact: {contact_id}"
    return run_tool(delete)


@mcp.tool()
def contacts_photo(photo_uri: str, save_path: str, account: str = "default") -> str:
    """
    Download a contact photo.

    Args:
        photo_uri: The contact's photo link
        save_path: File to write the image to
    """
    def photo():
        data = manager.get_service(account).get_photo(photo_uri)
        target = Path(save_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return f"✅ Saved photo: {save_path} ({len(data)} bytes)"
    return run_tool(photo)


# =============================================================================
# BATCH TOOLS
# =============================================================================
@mcp.tool()
def contacts_batch_create(contacts: List[Dict], account: str = "default") -> str:
    """
    Create many contacts in one request.

    Args:
        contacts: Items with forename, surname, email, phone, groups
        account: Account name

    Returns:
        The raw batch response
    """
    return run_tool(lambda: manager.get_service(account).batch_create_contacts(
        [_contact_from_dict(c) for c in contacts]
    ))


@mcp.tool()
def contacts_batch_update(contacts: List[Dict], account: str = "default") -> str:
    """
    Update many contacts in one request.

    Args:
        contacts: Items with id, forename, surname, email, phone, groups
        account: Account name
    """
    return run_tool(lambda: manager.get_service(account).batch_update_contacts(
        [_contact_from_dict(c) for c in contacts]
    ))


@mcp.tool()
def contacts_batch_delete(contact_ids: List[str], account: str = "default") -> str:
    """Delete many contacts in one request."""
    return run_tool(lambda: manager.get_service(account).batch_delete_contacts(contact_ids))


# =============================================================================
# MAIN
# =============================================================================
def main():
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="http", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
