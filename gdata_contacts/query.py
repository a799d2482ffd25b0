"""
Contacts Feed Query

Accumulates feed query parameters and renders them onto a feed URL.
"""

from typing import Dict, Iterable, Optional, Union

from .config import FULL_TEXT_PROTOCOL_VERSION


class ContactQuery:
    """Reusable query configuration for the contacts feed.

    Parameters are kept in insertion order. Values are written into the URL
    as-is: nothing is percent-encoded, so search text containing ``&``, ``#``
    or ``=`` produces a broken URL.
    """

    def __init__(self):
        self.params: Dict[str, str] = {}

    def copy(self) -> "ContactQuery":
        """Independent query with the same parameters."""
        query = ContactQuery()
        query.params = dict(self.params)
        return query

    def with_max_results(self, value: Union[int, str]) -> "ContactQuery":
        value = int(value)
        if value != 0:
            self.params["max-results"] = str(value)
        else:
            self.params.pop("max-results", None)
        return self

    def with_search_terms(self, terms: Union[str, Iterable[str]]) -> "ContactQuery":
        if isinstance(terms, str):
            text = terms
        else:
            text = " ".join(terms).rstrip()
        if not text:
            return self
        self.params["q"] = text
        # full-text queries only work on version 3
        return self.with_protocol_version(FULL_TEXT_PROTOCOL_VERSION)

    def with_protocol_version(self, version: Union[float, str]) -> "ContactQuery":
        self.params["v"] = str(float(version))
        return self

    @property
    def protocol_version(self) -> Optional[str]:
        return self.params.get("v")

    @property
    def search_text(self) -> Optional[str]:
        return self.params.get("q")

    @property
    def max_results(self) -> Optional[int]:
        value = self.params.get("max-results")
        return int(value) if value is not None else None

    def build(self, base_url: str) -> str:
        if not self.params:
            return base_url
        query = "&".join(f"{key}={value}" for key, value in self.params.items())
        return f"{base_url}?{query}"
