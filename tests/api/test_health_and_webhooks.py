"""Health, Webhook and Sitemap routes — verifies the JSON/XML endpoints.

Tests cover:
    - Liveness always 200; readiness follows external API health
    - BML webhook forwards the payload and maps the API result to 200/500
    - Webhook preflight headers
    - /sitemap.xml lists published activities, and static pages when the API fails
"""

import json

API = "http://api.test"


# -- Health --------------------------------------------------------------------


async def test_liveness(client):
    """GET /api/health is always healthy."""
    res = await client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_when_api_is_up(client, api_mock):
    """Readiness is 200 when the external API answers /health."""
    api_mock.get(f"{API}/health").respond(200, json={"status": "ok"})
    res = await client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["api"] == "healthy"


async def test_readiness_when_api_is_down(client, api_mock):
    """Readiness is 503 when the external API fails."""
    api_mock.get(f"{API}/health").respond(503)
    res = await client.get("/api/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "api_unavailable"


# -- BML webhook ---------------------------------------------------------------


async def test_webhook_forwards_payload(client, api_mock):
    """The payload reaches the external API untouched."""
    route = api_mock.post(f"{API}/api/webhooks/bml").respond(200, json={"success": True})
    payload = {"event_type": "NOTIFY_TRANSACTION_CHANGE", "transactionId": "t1", "state": "CONFIRMED"}
    res = await client.post("/api/webhooks/bml", json=payload)
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Webhook processed successfully"}
    assert json.loads(route.calls.last.request.content) == payload


async def test_webhook_failure_returns_500(client, api_mock):
    """A rejected payload answers 500 so BML retries."""
    api_mock.post(f"{API}/api/webhooks/bml").respond(
        400, json={"success": False, "error_message": "Invalid signature"},
    )
    res = await client.post("/api/webhooks/bml", json={"event_type": "x"})
    assert res.status_code == 500
    assert res.json()["error"] == "Invalid signature"


async def test_webhook_invalid_json(client):
    """A non-JSON body answers 500 without calling the API."""
    res = await client.post(
        "/api/webhooks/bml", content=b"not json", headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 500
    assert res.json()["success"] is False


async def test_webhook_preflight(client):
    """OPTIONS advertises the signature header."""
    res = await client.options("/api/webhooks/bml")
    assert res.status_code == 204
    assert "X-BML-Signature" in res.headers["Access-Control-Allow-Headers"]


# -- Sitemap -------------------------------------------------------------------


async def test_sitemap_lists_published_activities(client, api_mock):
    """Published activities appear once per locale."""
    api_mock.get(f"{API}/api/activities").respond(200, json={
        "success": True,
        "data": {"activities": [
            {"slug": "sandbank-picnic", "status": "published"},
            {"slug": "secret-draft", "status": "draft"},
        ]},
    })
    res = await client.get("/sitemap.xml")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/xml")
    assert "/en/activities/sandbank-picnic</loc>" in res.text
    assert "/it/activities/sandbank-picnic</loc>" in res.text
    assert "secret-draft" not in res.text


async def test_sitemap_survives_api_failure(client, api_mock):
    """Static pages are still listed when activities fail to load."""
    api_mock.get(f"{API}/api/activities").respond(500)
    res = await client.get("/sitemap.xml")
    assert res.status_code == 200
    assert "/en/faq</loc>" in res.text
