"""BML Webhook — forwards Bank of Maldives payment notifications to the external API.

Invariants:
    - The payload is forwarded untouched; the external API verifies the signature
    - 200 only when the external API accepted the payload; otherwise 500 so BML retries
    - OPTIONS preflight answers with the headers BML sends
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from rihigo_web.api.dependencies import Services, get_services

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-BML-Signature",
}


@router.post("/bml")
async def bml_webhook(request: Request, services: Services = Depends(get_services)):
    try:
        payload = await request.json()
    except ValueError:
        logger.error("BML webhook with invalid JSON body", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error processing webhook"},
        )

    event = payload.get("event_type") if isinstance(payload, dict) else None
    logger.info(f"BML webhook received: {event or 'unknown event'}")

    response = await services.booking.forward_webhook(payload)
    if response.success:
        return {"success": True, "message": "Webhook processed successfully"}

    logger.error(f"BML webhook processing failed: {response.error_message}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": response.error_message or "Webhook processing failed",
        },
    )


@router.options("/bml")
async def bml_webhook_preflight():
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=PREFLIGHT_HEADERS)
