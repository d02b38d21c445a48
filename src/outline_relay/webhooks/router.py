"""
Webhook router for the Outline relay.

Handles:
- /outline-webhook - Outline document events (documents.create/update/delete)

Every delivery is signature-checked against the raw body before the payload
is decoded. Accepted events are formatted and posted to Zulip; the caller
gets 200 "ok" whatever happens to the Zulip post.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.requests import ClientDisconnect

from outline_relay.clients import ZulipClient
from outline_relay.config import Settings
from outline_relay.formatting import format_message
from outline_relay.models import decode_envelope
from outline_relay.webhooks.signatures import (
    MissingCredentialsError,
    SignatureVerificationError,
    verify_outline_signature,
)


def _log(event: str, **fields: Any) -> None:
    """Structured logging."""
    try:
        payload = {"service": "outline-relay", "event": event, **fields}
        print(json.dumps(payload, default=str))
    except Exception:
        print(f"{event} {fields}")


router = APIRouter(tags=["webhooks"])


@router.post("/outline-webhook", response_class=PlainTextResponse)
async def outline_webhook(
    request: Request,
    outline_signature: str = Header(default="", alias="Outline-Signature"),
):
    """
    Handle Outline webhooks.

    403 on a missing or bad signature, 400 on an unreadable or malformed body.
    """
    settings: Settings = request.app.state.settings
    zulip: ZulipClient = request.app.state.zulip_client
    # Set by RequestIdMiddleware.
    request_id = getattr(request.state, "request_id", None)

    # The same bytes feed both the HMAC and the JSON decoder.
    try:
        raw_body = await request.body()
    except ClientDisconnect as e:
        _log(
            "outline_webhook_body_unreadable", request_id=request_id, error=str(e)
        )
        raise HTTPException(status_code=400, detail="bad request")

    try:
        verify_outline_signature(
            raw_body=raw_body,
            header_value=outline_signature or None,
            secret=settings.outline_webhook_secret,
        )
    except SignatureVerificationError as e:
        _log(
            "outline_webhook_signature_failed", request_id=request_id, reason=e.reason
        )
        detail = (
            "invalid signature header"
            if isinstance(e, MissingCredentialsError)
            else "invalid signature"
        )
        raise HTTPException(status_code=403, detail=detail)

    try:
        envelope = decode_envelope(raw_body)
    except ValidationError as e:
        _log(
            "outline_webhook_invalid_payload",
            request_id=request_id,
            errors=e.error_count(),
        )
        raise HTTPException(status_code=400, detail="Bad Request")

    message = format_message(envelope, settings.outline_base_url)

    _log(
        "outline_webhook_received",
        request_id=request_id,
        outline_event=envelope.event,
        document_id=envelope.document.id or envelope.document.document_id,
        title=envelope.document.title,
    )

    # Blocking post runs in the threadpool; a slow Zulip only stalls this request.
    await run_in_threadpool(zulip.send_message, message)

    return PlainTextResponse("ok")
