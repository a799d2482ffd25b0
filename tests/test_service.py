import pytest
from lxml import etree

from conftest import BATCH_RESPONSE_XML, CONTACT_ID, ENTRY_XML, FEED_XML, PHOTO_URI
from gdata_contacts.config import DEFAULT_FEED_URL
from gdata_contacts.entry_codec import ATOM_ENTRY, BATCH_OPERATION, GCONTACT_GROUP, decode_entry
from gdata_contacts.errors import ParseError, ProtocolError
from gdata_contacts.interface import Contact
from gdata_contacts.service import ATOM_ENTRY_CONTENT_TYPE, ContactService

GROUP_C = "http://www.google.com/m8/feeds/groups/user%40example.com/base/C"


@pytest.fixture
def service(transport):
    return ContactService(transport)


def test_list_contacts(service, transport):
    transport.queue(body=FEED_XML)

    contacts = service.list_contacts()

    assert len(contacts) == 2
    sent = transport.requests[0]
    assert sent["method"] == "GET"
    assert sent["url"] == f"{DEFAULT_FEED_URL}?max-results=10000"
    assert "GData-Version" not in sent["headers"]


def test_search_sends_version_3(service, transport):
    transport.queue(body=FEED_XML)

    service.search_contacts(["alice", "smith"], max_results=50)

    sent = transport.requests[0]
    assert sent["url"] == f"{DEFAULT_FEED_URL}?q=alice smith&v=3.0&max-results=50"
    assert sent["headers"]["GData-Version"] == "3.0"


def test_get_contact(service, transport):
    transport.queue(body=ENTRY_XML)

    contact = service.get_contact(CONTACT_ID)

    assert transport.requests[0]["url"] == CONTACT_ID
    assert contact.photo_uri == PHOTO_URI
    assert contact.phone_number == "5551234567"


def test_get_photo_returns_bytes(service, transport):
    transport.queue(body=b"\x89PNG")
    assert service.get_photo(PHOTO_URI) == b"\x89PNG"
    assert transport.requests[0]["url"] == PHOTO_URI


def test_create_contact(service, transport):
    transport.queue(status=201, body=ENTRY_XML)

    created = service.create_contact("Alice", "Smith", "alice@example.com", "555-123-4567")

    assert created.id == CONTACT_ID
    sent = transport.requests[0]
    assert sent["method"] == "POST"
    assert sent["url"] == DEFAULT_FEED_URL
    assert sent["headers"]["Content-Type"] == ATOM_ENTRY_CONTENT_TYPE
    posted = decode_entry(sent["body"])
    assert posted.title == "Alice Smith"
    assert posted.id is None


def test_create_failure_propagates(service, transport):
    transport.queue(status=400, body="<errors><error>Invalid</error></errors>")

    with pytest.raises(ProtocolError) as excinfo:
        service.create_contact("Alice", "Smith", "alice@example.com")

    assert excinfo.value.status == 400
    assert "Invalid" in excinfo.value.body


def test_update_replaces_groups(service, transport):
    transport.queue(body=ENTRY_XML).queue(body=b"")

    updated = service.update_contact(CONTACT_ID, "Alice", "Jones", "aj@example.com", None, [GROUP_C])

    get, put = transport.requests
    assert get["method"] == "GET"
    assert put["method"] == "PUT"
    assert put["url"] == CONTACT_ID
    assert put["headers"]["If-Match"] == "*"
    assert put["headers"]["Content-Type"] == ATOM_ENTRY_CONTENT_TYPE

    hrefs = [g.get("href") for g in etree.fromstring(put["body"]).iter(GCONTACT_GROUP)]
    assert hrefs == [GROUP_C]
    assert updated.groups == (GROUP_C,)
    assert updated.title == "Alice Jones"


def test_update_returns_server_entry_when_present(service, transport):
    transport.queue(body=ENTRY_XML).queue(body=ENTRY_XML)

    updated = service.update_contact(CONTACT_ID, "Alice", "Jones", "aj@example.com")

    assert updated.title == "Alice Smith"


def test_update_of_missing_contact(service, transport):
    transport.queue(status=404, body="Contact not found")

    with pytest.raises(ProtocolError):
        service.update_contact(CONTACT_ID, "Alice", "Jones", "aj@example.com")

    assert len(transport.requests) == 1


def test_delete_contact(service, transport):
    service.delete_contact(CONTACT_ID)

    sent = transport.requests[0]
    assert sent["method"] == "DELETE"
    assert sent["url"] == CONTACT_ID
    assert sent["headers"]["If-Match"] == "*"
    assert sent["body"] is None


def test_malformed_response(service, transport):
    transport.queue(body="not xml at all <")
    with pytest.raises(ParseError):
        service.list_contacts()


def test_batch_delete(service, transport):
    transport.queue(body=BATCH_RESPONSE_XML)

    result = service.batch_delete_contacts(["id1", "id2"])

    assert result == BATCH_RESPONSE_XML
    sent = transport.requests[0]
    assert sent["url"] == f"{DEFAULT_FEED_URL}/batch"
    assert sent["headers"]["If-Match"] == "*"
    entries = etree.fromstring(sent["body"]).findall(ATOM_ENTRY)
    assert [e.find(BATCH_OPERATION).get("type") for e in entries] == ["delete", "delete"]


def test_batch_create(service, transport):
    service.batch_create_contacts([
        Contact.new("A", "One", "a@example.com"),
        Contact.new("B", "Two", "b@example.com"),
    ])

    sent = transport.requests[0]
    entries = etree.fromstring(sent["body"]).findall(ATOM_ENTRY)
    assert [e.find(BATCH_OPERATION).get("type") for e in entries] == ["insert", "insert"]
    assert "GData-Version" not in sent["headers"]


def test_batch_update_forces_version_3(service, transport):
    service.batch_update_contacts([Contact.new("A", "One", "a@example.com", id=CONTACT_ID)])
    assert transport.requests[0]["headers"]["GData-Version"] == "3.0"


def test_batch_error_status(service, transport):
    transport.queue(status=500, body="backend error")
    with pytest.raises(ProtocolError):
        service.batch_delete_contacts(["id1"])


def test_feed_url_trailing_slash(transport):
    service = ContactService(transport, feed_url="https://example.com/feed/")
    assert service.batch_url == "https://example.com/feed/batch"


def test_close_closes_transport(service, transport):
    service.close()
    assert transport.closed


def test_search_does_not_filter_later_calls(service, transport):
    transport.queue(body=FEED_XML).queue(body=FEED_XML).queue(status=201, body=ENTRY_XML)

    service.search_contacts(["alice"])
    service.list_contacts()
    service.create_contact("Alice", "Smith", "alice@example.com")

    search, listing, create = transport.requests
    assert search["url"] == f"{DEFAULT_FEED_URL}?q=alice&v=3.0&max-results=10000"
    assert listing["url"] == f"{DEFAULT_FEED_URL}?max-results=10000"
    assert "GData-Version" not in listing["headers"]
    assert create["url"] == DEFAULT_FEED_URL
    assert service.query.params == {}


def test_configured_query_parameters_persist(service, transport):
    service.query.with_protocol_version(3)
    transport.queue(body=FEED_XML)

    service.list_contacts(25)

    sent = transport.requests[0]
    assert sent["url"] == f"{DEFAULT_FEED_URL}?v=3.0&max-results=25"
    assert sent["headers"]["GData-Version"] == "3.0"
    assert service.query.max_results is None
