#!/usr/bin/env python3
"""
Contacts Feed OAuth Setup

Obtains the authorized-user token the contacts transport reads. Supports both
automatic (browser) and manual (headless) authorization flows.

Usage:
    gdata-contacts-oauth status                  # Show token status
    gdata-contacts-oauth authorize               # Authorize (tries browser)
    gdata-contacts-oauth authorize --manual      # Authorize (headless/manual)
    gdata-contacts-oauth authorize --force       # Re-authorize
"""

import argparse
import sys
from pathlib import Path

from google.auth import exceptions as auth_exceptions
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow, InstalledAppFlow

from .config import CONTACTS_FEED_SCOPE, CREDENTIALS_FILE, DEFAULT_TOKEN_PATH

SCOPES = [CONTACTS_FEED_SCOPE]
REDIRECT_URI = "http://localhost:8085"


def check_token(token_path: Path = DEFAULT_TOKEN_PATH) -> dict:
    """Check status of the contacts token."""
    result = {
        "token_file": str(token_path),
        "exists": token_path.exists(),
        "valid": False,
        "scopes": [],
        "expired": None,
        "has_required_scopes": False
    }

    if not token_path.exists():
        return result

    try:
        creds = Credentials.from_authorized_user_file(str(token_path))
    except (ValueError, OSError) as e:
        result["error"] = str(e)
        return result

    result["valid"] = creds.valid
    result["scopes"] = list(creds.scopes) if creds.scopes else []
    result["expired"] = creds.expired
    result["has_required_scopes"] = set(SCOPES).issubset(set(result["scopes"]))
    return result


def show_status(token_path: Path = DEFAULT_TOKEN_PATH) -> None:
    """Print the contacts token status."""
    print("🔐 Contacts Feed Token Status\n")
    print(f"   Credentials file: {CREDENTIALS_FILE}")
    print(f"   Exists: {'✅' if CREDENTIALS_FILE.exists() else '❌'}\n")

    status = check_token(token_path)
    print(f"   Token: {status['token_file']}")

    if not status["exists"]:
        print("   Status: Not configured")
    elif status.get("error"):
        print(f"   Status: Error - {status['error']}")
    elif not status["has_required_scopes"]:
        print("   Status: Missing scopes (re-auth needed)")
    elif status["expired"]:
        print("   Status: Expired (will auto-refresh)")
    else:
        print("   Status: Ready")


def _save(creds: Credentials, token_path: Path) -> None:
    token_path.parent.mkdir(parents=True, exist_ok=True)
    with open(token_path, 'w') as f:
        f.write(creds.to_json())


def authorize_manual(token_path: Path = DEFAULT_TOKEN_PATH) -> int:
    """Manual OAuth flow for headless environments."""
    flow = Flow.from_client_secrets_file(
        str(CREDENTIALS_FILE),
        scopes=SCOPES,
        redirect_uri=REDIRECT_URI
    )

    auth_url, _ = flow.authorization_url(
        access_type='offline',
        include_granted_scopes='true',
        prompt='consent'
    )

    print("=" * 60)
    print("STEP 1: Open this URL in a browser:\n")
    print(auth_url)
    print("\n" + "=" * 60)
    print("\nSTEP 2: After authorizing, you'll be redirected to localhost")
    print("        (the page won't load - that's expected)")
    print("\nSTEP 3: Copy the FULL URL from your browser's address bar")
    print("\n" + "=" * 60)

    redirect_response = input("\nPaste the full redirect URL here: ").strip()
    if not redirect_response:
        print("❌ No URL provided")
        return 1

    try:
        flow.fetch_token(authorization_response=redirect_response)
    except (ValueError, auth_exceptions.GoogleAuthError) as e:
        print(f"\n❌ Failed to exchange code: {e}")
        return 1

    _save(flow.credentials, token_path)
    print(f"\n✅ Token saved: {token_path}")
    return 0


def authorize(token_path: Path = DEFAULT_TOKEN_PATH, force: bool = False, manual: bool = False) -> int:
    """Authorize access to the contacts feed."""
    if not CREDENTIALS_FILE.exists():
        print(f"❌ Credentials file not found: {CREDENTIALS_FILE}")
        return 1

    print(f"🔧 Setting up contacts feed access")
    print(f"   Token file: {token_path}")

    if token_path.exists() and not force:
        status = check_token(token_path)
        if status["has_required_scopes"]:
            creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
            if creds.expired and creds.refresh_token:
                print("🔄 Refreshing expired token...")
                creds.refresh(Request())
                _save(creds, token_path)
            print(f"✅ Token ready: {token_path.name}")
            return 0
        print("⚠️  Token missing scopes, need to re-authorize")

    if manual:
        return authorize_manual(token_path)

    print("\n🌐 Starting OAuth flow (browser)...")
    flow = InstalledAppFlow.from_client_secrets_file(
        str(CREDENTIALS_FILE),
        SCOPES,
        redirect_uri=REDIRECT_URI
    )

    try:
        creds = flow.run_local_server(port=8085, prompt="consent", access_type="offline")
    except OSError as e:
        print(f"\n⚠️  Browser flow failed: {e}")
        print("   Falling back to manual flow...\n")
        return authorize_manual(token_path)

    _save(creds, token_path)
    print(f"\n✅ Token saved: {token_path}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Contacts feed OAuth setup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s status                 Show token status
  %(prog)s authorize              Authorize (browser)
  %(prog)s authorize --manual     Authorize (headless)
  %(prog)s authorize --force      Re-authorize
"""
    )
    parser.add_argument("command", nargs="?", default="status", choices=["status", "authorize"])
    parser.add_argument("--token", type=Path, default=DEFAULT_TOKEN_PATH, help="Token file to write")
    parser.add_argument("--force", action="store_true", help="Force re-authorization even if token exists")
    parser.add_argument("--manual", action="store_true", help="Use manual flow (for headless environments)")
    args = parser.parse_args(argv)

    if args.command == "status":
        show_status(args.token)
        return 0

    return authorize(args.token, args.force, args.manual)


if __name__ == "__main__":
    sys.exit(main())
