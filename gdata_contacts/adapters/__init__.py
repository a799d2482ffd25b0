"""
Transport adapters for the contacts feed.
"""

from .google_auth import AuthorizedSessionTransport, load_credentials

__all__ = ["AuthorizedSessionTransport", "load_credentials"]
