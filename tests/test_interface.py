import dataclasses

import pytest

from gdata_contacts.interface import Contact

GROUP = "http://www.google.com/m8/feeds/groups/user%40example.com/base/A"


def test_single_group_string_is_kept_whole():
    assert Contact(groups=GROUP).groups == (GROUP,)
    assert Contact.new("Alice", "Smith", groups=GROUP).groups == (GROUP,)


def test_duplicate_groups_dropped_in_order():
    assert Contact(groups=[GROUP, "b", GROUP]).groups == (GROUP, "b")


def test_id_cannot_be_reassigned():
    contact = Contact(id="http://example.com/c/1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        contact.id = "http://example.com/c/2"


def test_full_name_prefers_name_parts():
    assert Contact.new("Alice", "Smith").full_name == "Alice Smith"
    assert Contact(title="Stored Title").full_name == "Stored Title"
