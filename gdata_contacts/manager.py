"""
Contacts Account Manager

Manages named contacts accounts and their ContactService instances.
"""

import json
from pathlib import Path
from typing import Callable, Dict, Optional
import logging

from .config import ACCOUNTS_FILE, DEFAULT_FEED_URL, DEFAULT_TOKEN_PATH
from .interface import ContactsAccount, ContactsTransport
from .service import ContactService

logger = logging.getLogger(__name__)

TransportFactory = Callable[[ContactsAccount], ContactsTransport]


def default_transport_factory(account: ContactsAccount) -> ContactsTransport:
    """Open a google-auth session from the account's token file."""
    from .adapters.google_auth import AuthorizedSessionTransport

    return AuthorizedSessionTransport.from_token_file(
        account.token_path,
        timeout=account.config.get("timeout")
    )


class ContactsManager:
    """Manages contacts accounts and service instances."""

    def __init__(self, config_path: Optional[Path] = None,
                 transport_factory: Optional[TransportFactory] = None):
        self.config_path = Path(config_path or ACCOUNTS_FILE)
        self.transport_factory = transport_factory or default_transport_factory
        self.accounts: Dict[str, ContactsAccount] = {}
        self.services: Dict[str, ContactService] = {}

        self._load_accounts()

    def _load_accounts(self) -> None:
        """Load accounts from config file."""
        if not self.config_path.exists():
            logger.info("No contacts accounts config found, starting fresh")
            return

        try:
            config = json.loads(self.config_path.read_text())
        except (OSError, ValueError) as e:
            logger.error(f"❌ Failed to load accounts: {e}")
            return

        for name, data in config.get("accounts", {}).items():
            self.accounts[name] = ContactsAccount(
                name=name,
                token_path=data.get("token_path", str(DEFAULT_TOKEN_PATH)),
                feed_url=data.get("feed_url", DEFAULT_FEED_URL),
                config=data.get("config", {})
            )
        logger.info(f"✅ Loaded {len(self.accounts)} contacts accounts")

    def _save_accounts(self) -> None:
        """Save accounts to config file."""
        config = {"accounts": {}}
        for name, account in self.accounts.items():
            config["accounts"][name] = {
                "token_path": account.token_path,
                "feed_url": account.feed_url,
                "config": account.config
            }

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(json.dumps(config, indent=2))

    def add_account(
        self,
        name: str,
        token_path: str = "",
        feed_url: str = "",
        config: Optional[Dict] = None
    ) -> str:
        """Add a new contacts account."""
        if name in self.accounts:
            return f"❌ Account '{name}' already exists"

        self.accounts[name] = ContactsAccount(
            name=name,
            token_path=token_path or str(DEFAULT_TOKEN_PATH),
            feed_url=feed_url or DEFAULT_FEED_URL,
            config=config or {}
        )
        self._save_accounts()

        return f"✅ Added contacts account: {name}"

    def remove_account(self, name: str) -> str:
        """Remove a contacts account."""
        if name not in self.accounts:
            return f"❌ Account '{name}' not found"

        service = self.services.pop(name, None)
        if service:
            service.close()

        del self.accounts[name]
        self._save_accounts()

        return f"✅ Removed contacts account: {name}"

    def list_accounts(self) -> str:
        """List all configured accounts."""
        if not self.accounts:
            return "👤 No contacts accounts configured"

        lines = ["👤 Contacts Accounts", "─" * 40]
        for name, account in self.accounts.items():
            connected = "🟢" if name in self.services else "⚪"
            lines.append(f"{connected} {name} ({account.feed_url})")

        return "\n".join(lines)

    def get_service(self, account_name: str) -> ContactService:
        """
        Get or create the service for an account.

        Raises:
            KeyError: If the account is not configured
            TransportError: If the account's credentials cannot be loaded
        """
        if account_name in self.services:
            return self.services[account_name]

        if account_name not in self.accounts:
            raise KeyError(f"Account not found: {account_name}")

        account = self.accounts[account_name]
        service = ContactService(self.transport_factory(account), feed_url=account.feed_url)
        self.services[account_name] = service
        return service
