"""Account Routes — profile, notification preferences and the notification inbox.

Tests cover:
    - Profile page loads the user's details from the API
    - Profile update sends name and preferences, then redirects with a toast
    - Invalid profile form re-renders with 400 without calling the API
    - Notification preferences: quiet hours cleared when disabled, toast on the next page
    - Mark-all-read redirects back to the inbox
"""

import json

API = "http://api.test"


async def test_profile_shows_api_details(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/users/me").respond(200, json={"success": True, "data": {
        "id": "u1", "name": "Aisha Ali", "phone": "+9607771234",
        "preferences": {"currency": "EUR"},
    }})
    response = await client.get("/en/profile")
    assert response.status_code == 200
    assert "Aisha Ali" in response.text
    assert "+9607771234" in response.text


async def test_profile_update_redirects_with_toast(client, sign_in, api_mock):
    sign_in()
    update = api_mock.put(f"{API}/api/users/me").respond(
        200, json={"success": True, "data": {"id": "u1"}},
    )
    response = await client.post("/en/profile", data={
        "name": "Aisha Ali", "phone": "", "preferred_currency": "EUR",
    })
    assert response.status_code == 303
    assert response.headers["location"] == "/en/profile"
    assert json.loads(update.calls.last.request.content) == {
        "name": "Aisha Ali", "preferences": {"currency": "EUR"},
    }

    page = await client.get("/en/profile")
    assert "Profile updated" in page.text


async def test_profile_update_requires_name(client, sign_in, api_mock):
    sign_in()
    update = api_mock.put(f"{API}/api/users/me")
    response = await client.post("/en/profile", data={"name": "  "})
    assert response.status_code == 400
    assert "Name is required" in response.text
    assert not update.called


async def test_notification_preferences_saved(client, sign_in, api_mock):
    sign_in()
    save = api_mock.put(f"{API}/api/notifications/preferences").respond(
        200, json={"success": True, "data": {}},
    )
    response = await client.post("/en/profile/notifications", data={
        "email_enabled": "on", "quiet_hours_start": "23:00",
    })
    assert response.status_code == 303
    assert response.headers["location"] == "/en/profile"
    assert json.loads(save.calls.last.request.content) == {
        "email_enabled": True,
        "sms_enabled": False,
        "quiet_hours_start": None,
        "quiet_hours_end": None,
    }

    page = await client.get("/en/profile")
    assert "Notification preferences saved" in page.text


async def test_notification_preferences_bad_time_is_toasted(client, sign_in, api_mock):
    sign_in()
    save = api_mock.put(f"{API}/api/notifications/preferences")
    response = await client.post("/en/profile/notifications", data={
        "quiet_hours_enabled": "on", "quiet_hours_start": "late",
    })
    assert response.status_code == 303
    assert not save.called

    page = await client.get("/en/profile")
    assert "Quiet hours start has an invalid format" in page.text


async def test_mark_all_read(client, sign_in, api_mock):
    sign_in()
    mark = api_mock.put(f"{API}/api/notifications/read-all").respond(
        200, json={"success": True},
    )
    response = await client.post("/en/notifications/read-all")
    assert response.status_code == 303
    assert response.headers["location"] == "/en/notifications"
    assert mark.called
