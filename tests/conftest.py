import pytest
from models.recipient_entry import RecipientEntry

@pytest.fixture
def top_level_entry():
    return RecipientEntry.construct_top_level_entry(
        "Jane Doe",
        "jane@example.com",
        42,
        "content://com.android.contacts/contacts/42/photo"
    )

@pytest.fixture
def mock_contact_rows():
    return [
        {"contact_id": 1, "display_name": "Jane Doe", "destination": "jane@example.com",
         "photo_thumbnail_uri": "content://com.android.contacts/contacts/1/photo"},
        {"contact_id": 1, "display_name": "Jane Doe", "destination": "jane@work.example.com"},
        {"contact_id": 2, "name": "John Roe", "email": "john@example.com"},
        {"contact_id": 1, "display_name": "Jane Doe", "destination": "+1 555 0100"},
    ]
