"""
Shared configuration constants for the contacts client.

Import from here to avoid duplication across the service, manager, server and
OAuth setup script.
"""

from pathlib import Path

# Base paths
DATA_ROOT = Path("/data")
CONFIG_DIR = DATA_ROOT / "config"

# Account and token files
ACCOUNTS_FILE = CONFIG_DIR / "gdata_contacts_accounts.json"
DEFAULT_TOKEN_PATH = CONFIG_DIR / "gdata_contacts_token.json"
CREDENTIALS_FILE = CONFIG_DIR / "gdrive_credentials.json"

# Feed endpoints
DEFAULT_FEED_URL = "https://www.google.com/m8/feeds/contacts/default/full"
BATCH_SUFFIX = "/batch"

# OAuth scope covering the legacy contacts feed
CONTACTS_FEED_SCOPE = "https://www.google.com/m8/feeds"

# listing pulls everything in one page unless told otherwise
DEFAULT_MAX_RESULTS = 10000

# Full-text search and batch update require this wire version
FULL_TEXT_PROTOCOL_VERSION = "3.0"
