"""Booking Routes — dynamic booking form, creation, payment start and callback.

Tests cover:
    - Calendar navigation: a disabled day keeps the bound date, an open day selects it
    - Missing required fields and dates before today re-render the form with 400
    - My bookings, confirmation and pay pages render the booking total_price
    - Successful creation posts the booking body and redirects to the confirmation
    - Payment start redirects to the BML page; callback classifies the outcome
    - Callback without a transaction reference is a 400
"""

import json
from datetime import date

import pytest

from rihigo_web.api.routes import booking as booking_routes

API = "http://api.test"

ACTIVITY = {
    "id": "a1",
    "slug": "sandbank-picnic",
    "title": "Sandbank Picnic",
    "booking_type": "standard",
}


@pytest.fixture
def activity(api_mock, monkeypatch):
    monkeypatch.setattr(booking_routes, "today", lambda: date(2025, 3, 10))
    api_mock.get(f"{API}/api/activities/slug/sandbank-picnic").respond(
        200, json={"success": True, "data": ACTIVITY},
    )
    return ACTIVITY


# -- Form ----------------------------------------------------------------------

async def test_clicking_past_day_keeps_selected_date(client, sign_in, activity):
    """Day 5 is before today: the form still shows March 12."""
    sign_in()
    response = await client.get(
        "/en/booking/sandbank-picnic",
        params={"month": "2025-03", "day": 5, "booking_date": "2025-03-12"},
    )
    assert response.status_code == 200
    assert "March 12, 2025" in response.text


async def test_clicking_open_day_selects_it(client, sign_in, activity):
    sign_in()
    response = await client.get(
        "/en/booking/sandbank-picnic",
        params={"month": "2025-03", "day": 20, "booking_date": "2025-03-12"},
    )
    assert response.status_code == 200
    assert "March 20, 2025" in response.text


async def test_form_prefills_signed_in_email(client, sign_in, activity):
    sign_in(email="aisha@example.mv")
    response = await client.get("/en/booking/sandbank-picnic")
    assert response.status_code == 200
    assert "aisha@example.mv" in response.text


async def test_missing_fields_rerender_with_errors(client, sign_in, activity):
    sign_in()
    response = await client.post("/en/booking/sandbank-picnic", data={
        "booking_date": "2030-06-01",
        "number_of_people": "2",
        "email": "aisha@example.mv",
        "phone": "+9607771234",
    })
    assert response.status_code == 400
    assert "Full Name is required" in response.text


# -- Create --------------------------------------------------------------------

async def test_create_posts_booking_and_redirects(client, sign_in, activity, api_mock):
    sign_in()
    create = api_mock.post(f"{API}/api/bookings").respond(
        201, json={"success": True, "data": {"id": "b1"}},
    )
    response = await client.post("/en/booking/sandbank-picnic", data={
        "booking_date": "2030-06-01",
        "number_of_people": "2",
        "full_name": "Aisha Ali",
        "email": "aisha@example.mv",
        "phone": "+9607771234",
        "nationality": "Maldivian",
    })
    assert response.status_code == 303
    assert response.headers["location"] == "/en/bookings/b1/confirmation"

    body = json.loads(create.calls.last.request.content)
    assert body["activity_id"] == "a1"
    assert body["booking_date"] == "2030-06-01"
    assert body["number_of_people"] == 2
    assert body["customer_info"]["name"] == "Aisha Ali"
    assert create.calls.last.request.headers["authorization"] == "Bearer test-id-token"


async def test_past_date_is_rejected(client, sign_in, activity, api_mock):
    """Today is March 10: a hand-edited date before it never reaches the API."""
    sign_in()
    create = api_mock.post(f"{API}/api/bookings")
    response = await client.post("/en/booking/sandbank-picnic", data={
        "booking_date": "2020-01-01",
        "number_of_people": "2",
        "full_name": "Aisha Ali",
        "email": "aisha@example.mv",
        "phone": "+9607771234",
    })
    assert response.status_code == 400
    assert "Select Date cannot be before 2025-03-10" in response.text
    assert not create.called


async def test_malformed_custom_field_rules_are_ignored(client, sign_in, api_mock, monkeypatch):
    monkeypatch.setattr(booking_routes, "today", lambda: date(2025, 3, 10))
    api_mock.get(f"{API}/api/activities/slug/reef-dive").respond(200, json={"success": True, "data": {
        **ACTIVITY,
        "slug": "reef-dive",
        "booking_field_config": {"custom_fields": [{
            "name": "cert_number", "type": "text", "label": "Certification",
            "validation": {"pattern": "[A-Z", "minLength": "x"},
        }]},
    }})
    sign_in()
    create = api_mock.post(f"{API}/api/bookings").respond(
        201, json={"success": True, "data": {"id": "b3"}},
    )
    response = await client.post("/en/booking/reef-dive", data={
        "booking_date": "2030-06-01",
        "number_of_people": "2",
        "full_name": "Aisha Ali",
        "email": "aisha@example.mv",
        "phone": "+9607771234",
        "cert_number": "padi-123",
    })
    assert response.status_code == 303
    assert create.called


async def test_create_failure_shows_api_message(client, sign_in, activity, api_mock):
    sign_in()
    api_mock.post(f"{API}/api/bookings").respond(
        409, json={"success": False, "error_message": "Date is fully booked"},
    )
    response = await client.post("/en/booking/sandbank-picnic", data={
        "booking_date": "2030-06-01",
        "number_of_people": "2",
        "full_name": "Aisha Ali",
        "email": "aisha@example.mv",
        "phone": "+9607771234",
    })
    assert response.status_code == 400
    assert "Date is fully booked" in response.text


# -- Payment -------------------------------------------------------------------

async def test_pay_redirects_to_bml(client, sign_in, api_mock):
    sign_in()
    initiate = api_mock.post(f"{API}/api/payments/bml/initiate").respond(
        200, json={"success": True, "data": {"payment_url": "https://pay.bml.test/abc"}},
    )
    response = await client.post("/en/bookings/b1/pay")
    assert response.status_code == 303
    assert response.headers["location"] == "https://pay.bml.test/abc"
    body = json.loads(initiate.calls.last.request.content)
    assert body["booking_id"] == "b1"
    assert body["redirect_url"].endswith("/en/bookings/b1/pay/callback")


async def test_pay_page_redirects_when_not_payable(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/bookings/b1").respond(200, json={"success": True, "data": {
        "id": "b1", "vendor_confirmation_status": "pending", "payment_status": "unpaid",
    }})
    response = await client.get("/en/bookings/b1/pay")
    assert response.status_code == 302
    assert response.headers["location"] == "/en/bookings/b1/confirmation"


async def test_callback_success(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/payments/bml/status/tx-1").respond(
        200, json={"success": True, "data": {"status": "completed"}},
    )
    response = await client.get(
        "/en/bookings/b1/pay/callback", params={"transactionId": "tx-1"},
    )
    assert response.status_code == 200
    assert "Payment successful" in response.text
    assert "tx-1" in response.text


async def test_callback_declined_state(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/payments/bml/status/tx-2").respond(
        200, json={"success": True, "data": {"status": "pending"}},
    )
    response = await client.get(
        "/en/bookings/b1/pay/callback", params={"transactionId": "tx-2", "state": "DECLINED"},
    )
    assert "Payment failed" in response.text


async def test_callback_without_transaction_is_400(client, sign_in):
    sign_in()
    response = await client.get("/en/bookings/b1/pay/callback")
    assert response.status_code == 400
    assert "Missing transaction reference" in response.text


# -- My bookings ---------------------------------------------------------------

BOOKING = {
    "id": "b1",
    "booking_number": "RH-1001",
    "activity_id": "a1",
    "booking_date": "2025-03-12",
    "number_of_people": 2,
    "unit_price": 60.0,
    "subtotal": 120.0,
    "discount_amount": 0,
    "total_price": 120.0,
    "currency": "USD",
    "status": "pending",
    "payment_status": "unpaid",
    "vendor_confirmation_status": "confirmed",
}


async def test_my_bookings_shows_total_price(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/bookings").respond(200, json={
        "success": True, "data": {"bookings": [BOOKING]},
    })
    response = await client.get("/en/bookings")
    assert response.status_code == 200
    assert "RH-1001" in response.text
    assert "USD 120.00" in response.text


async def test_my_bookings_tolerates_missing_total(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/bookings").respond(200, json={
        "success": True, "data": {"bookings": [{"id": "b2", "status": "pending"}]},
    })
    response = await client.get("/en/bookings")
    assert response.status_code == 200


async def test_confirmation_shows_total_and_pay_link(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/bookings/b1").respond(200, json={"success": True, "data": BOOKING})
    response = await client.get("/en/bookings/b1/confirmation")
    assert response.status_code == 200
    assert "USD 120.00" in response.text
    assert "/en/bookings/b1/pay" in response.text


async def test_pay_page_shows_amount_due(client, sign_in, api_mock):
    sign_in()
    api_mock.get(f"{API}/api/bookings/b1").respond(200, json={"success": True, "data": BOOKING})
    response = await client.get("/en/bookings/b1/pay")
    assert response.status_code == 200
    assert "USD 120.00" in response.text
