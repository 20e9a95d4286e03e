"""Constants and request helpers shared by the test modules."""
from typing import Any

from httpx import AsyncClient

TEST_USER_ID = "3bb0c3f4-6d56-4b6d-9c28-8a4a4b4e2a11"
OTHER_USER_ID = "a5d2a57c-4c1e-41a7-8d0f-6f8a2f9b7e42"
ADMIN_USER_ID = "d1f5e5a2-0b3c-4f0e-9a7d-2c6b8e4f1a93"
ADMIN_ROLE = "ROLE_ADMIN"

# Constant for non-existent entity ID
FAKE_UUID = "00000000-0000-0000-0000-000000000000"


def bookmark_payload(user_id: str = TEST_USER_ID, **overrides: Any) -> dict[str, Any]:
    """A valid bookmark body, with any field overridden."""
    payload: dict[str, Any] = {
        "name": "Example Site",
        "location": "https://www.example.com/",
        "description": "An example website",
        "tags": ["example", "test"],
        "public": False,
        "language": "en",
        "user_id": user_id,
    }
    payload.update(overrides)
    return payload


async def create_bookmark(
    client: AsyncClient,
    user_id: str = TEST_USER_ID,
    **overrides: Any,
) -> dict[str, Any]:
    """Create a bookmark through the personal API and return its JSON."""
    response = await client.post(
        f"/api/personal/users/{user_id}/bookmarks",
        json=bookmark_payload(user_id, **overrides),
    )
    assert response.status_code == 201, response.text
    return response.json()
