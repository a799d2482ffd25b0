from typing import List, Optional

import pytest

from gdata_contacts.interface import ContactsTransport, TransportResponse

CONTACT_ID = "http://www.google.com/m8/feeds/contacts/user%40example.com/base/abc123"
PHOTO_URI = "https://www.google.com/m8/feeds/photos/media/user%40example.com/abc123"

ENTRY_XML = f"""<?xml version='1.0' encoding='UTF-8'?>
<entry xmlns="http://www.w3.org/2005/Atom"
       xmlns:gd="http://schemas.google.com/g/2005"
       xmlns:gContact="http://schemas.google.com/contact/2008"
       gd:etag="&quot;Qn0zfjVSLyp7I2A9XRdRFEwMQAE.&quot;">
  <id>{CONTACT_ID}</id>
  <updated>2011-08-18T12:34:56.789Z</updated>
  <category scheme="http://schemas.google.com/g/2005#kind" term="http://schemas.google.com/contact/2008#contact"/>
  <title>Alice Smith</title>
  <link rel="http://schemas.google.com/contacts/2008/rel#photo" type="image/*" href="https://example.com/read-only"/>
  <link rel="http://schemas.google.com/contacts/2008/rel#edit-photo" type="image/*" href="{PHOTO_URI}"/>
  <link rel="self" type="application/atom+xml" href="{CONTACT_ID}"/>
  <gd:email rel="http://schemas.google.com/g/2005#work" primary="true" address="alice@example.com"/>
  <gd:phoneNumber rel="http://schemas.google.com/g/2005#mobile" uri="tel:555-123-4567">555-123-4567</gd:phoneNumber>
  <gContact:groupMembershipInfo deleted="false" href="http://www.google.com/m8/feeds/groups/user%40example.com/base/A"/>
  <gContact:groupMembershipInfo deleted="false" href="http://www.google.com/m8/feeds/groups/user%40example.com/base/B"/>
</entry>
"""

BARE_ENTRY_XML = """<entry xmlns="http://www.w3.org/2005/Atom">
  <id>http://www.google.com/m8/feeds/contacts/user%40example.com/base/bare</id>
  <title>Bob Jones</title>
</entry>
"""

FEED_XML = f"""<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:gd="http://schemas.google.com/g/2005"
      xmlns:gContact="http://schemas.google.com/contact/2008">
  <id>user@example.com</id>
  <title>Alice's Contacts</title>
  {ENTRY_XML.split("?>", 1)[1]}
  {BARE_ENTRY_XML}
</feed>
"""

BATCH_RESPONSE_XML = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:batch="http://schemas.google.com/gdata/batch">
  <entry><batch:id>delete</batch:id><batch:operation type="delete"/><batch:status code="200" reason="Success"/></entry>
</feed>
"""


class FakeTransport(ContactsTransport):
    """Records every request and replies from a queue of responses."""

    def __init__(self, responses: Optional[List[TransportResponse]] = None):
        self.responses = list(responses or [])
        self.requests = []
        self.closed = False

    def queue(self, status: int = 200, body=b"") -> "FakeTransport":
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.responses.append(TransportResponse(status=status, body=body))
        return self

    def request(self, method, url, headers=None, body=None):
        self.requests.append({
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "body": body,
        })
        if not self.responses:
            return TransportResponse(status=200, body=b"")
        return self.responses.pop(0)

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    return FakeTransport()
