"""Support and IMUGA Routes — customer tickets and immigration declaration requests.

Tests cover:
    - Ticket creation validates lengths before calling the API
    - Created ticket redirects to its page
    - IMUGA form is public and prefilled for signed-in users
    - IMUGA submission needs at least one traveler; success shows the reference number
    - Unknown IMUGA reference is a 404
"""

import json

API = "http://api.test"

IMUGA_FORM = {
    "requester_name": "Marco Rossi",
    "requester_email": "marco@example.it",
    "accommodation_name": "Sunset Guesthouse",
    "arrival_date": "2030-06-01",
    "departure_date": "2030-06-08",
    "arrival_flight": "EK652",
}


# -- Tickets -------------------------------------------------------------------

async def test_short_ticket_is_rejected(client, sign_in, api_mock):
    sign_in()
    create = api_mock.post(f"{API}/api/tickets")
    response = await client.post("/en/support/new", data={"subject": "Hi", "message": "short"})
    assert response.status_code == 400
    assert "Subject must be at least 3 characters" in response.text
    assert not create.called


async def test_ticket_created(client, sign_in, api_mock):
    sign_in()
    create = api_mock.post(f"{API}/api/tickets").respond(
        201, json={"success": True, "data": {"id": "t1", "ticket_number": "TKT-0001"}},
    )
    response = await client.post("/en/support/new", data={
        "subject": "Refund question",
        "message": "Can I move my booking to next week?",
    })
    assert response.status_code == 303
    assert response.headers["location"] == "/en/support/tickets/t1"
    body = json.loads(create.calls.last.request.content)
    assert body["category"] == "general"
    assert body["priority"] == "normal"


# -- IMUGA ---------------------------------------------------------------------

async def test_imuga_form_is_public(client):
    response = await client.get("/en/imuga")
    assert response.status_code == 200


async def test_imuga_form_prefills_signed_in_user(client, sign_in):
    sign_in(email="marco@example.it")
    response = await client.get("/en/imuga")
    assert "marco@example.it" in response.text


async def test_imuga_requires_traveler(client, api_mock):
    create = api_mock.post(f"{API}/api/imuga/requests")
    response = await client.post("/en/imuga", data=IMUGA_FORM)
    assert response.status_code == 400
    assert "At least one traveler is required" in response.text
    assert not create.called


async def test_imuga_submitted(client, api_mock):
    create = api_mock.post(f"{API}/api/imuga/requests").respond(
        201, json={"success": True, "data": {"request_number": "IMG-2030-0001"}},
    )
    response = await client.post("/en/imuga", data={
        **IMUGA_FORM,
        "travelers_json": json.dumps([{"full_name": "Marco Rossi", "nationality": "IT"}]),
    })
    assert response.status_code == 200
    assert "IMG-2030-0001" in response.text
    body = json.loads(create.calls.last.request.content)
    assert body["travelers_data"] == [{"full_name": "Marco Rossi", "nationality": "IT"}]
    assert "authorization" not in create.calls.last.request.headers


async def test_imuga_status_not_found(client, api_mock):
    api_mock.get(f"{API}/api/imuga/requests/IMG-404/status").respond(
        404, json={"success": False, "error_message": "Not found"},
    )
    response = await client.get("/en/imuga/IMG-404")
    assert response.status_code == 404
