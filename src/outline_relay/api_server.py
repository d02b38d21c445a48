from __future__ import annotations

import json
import sys
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI

from outline_relay import __version__
from outline_relay.clients import ZulipClient
from outline_relay.config import Settings, load_settings
from outline_relay.webhooks.router import router as webhook_router


def _new_request_id() -> str:
    return uuid.uuid4().hex


def _log(event: str, **fields: Any) -> None:
    try:
        payload = {
            "service": "outline-relay",
            "event": event,
            **fields,
        }
        print(json.dumps(payload, default=str))
    except Exception:
        print(f"{event} {fields}")


class RequestIdMiddleware:
    """
    Pure ASGI middleware: tags each request with an X-Request-ID and writes
    one access log line when the response is done.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        rid = (headers.get(b"x-request-id") or b"").decode(
            "utf-8"
        ) or _new_request_id()

        scope["state"] = scope.get("state", {})
        scope["state"]["request_id"] = rid

        method = scope.get("method", "")
        path = scope.get("path", "")
        start = time.time()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", rid.encode("utf-8")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as e:
            _log(
                "http_request_failed",
                request_id=rid,
                method=method,
                path=path,
                error=str(e),
                duration_ms=int((time.time() - start) * 1000),
            )
            raise
        _log(
            "http_request",
            request_id=rid,
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=int((time.time() - start) * 1000),
        )


def create_app(
    settings: Optional[Settings] = None,
    zulip_client: Optional[ZulipClient] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        s = settings or load_settings()
        app_.state.settings = s
        app_.state.zulip_client = zulip_client or ZulipClient(
            webhook_url=s.zulip_webhook_url,
            stream=s.zulip_stream,
            topic=s.zulip_topic,
            timeout_seconds=s.zulip_timeout_seconds,
        )
        yield

    app = FastAPI(title="Outline Relay", version=__version__, lifespan=lifespan)

    app.include_router(webhook_router)
    app.add_middleware(RequestIdMiddleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


# For `uvicorn outline_relay.api_server:app`; settings are read at startup.
app = create_app()


def main() -> None:
    import uvicorn

    try:
        settings = load_settings()
    except RuntimeError as e:
        _log("startup_config_error", error=str(e))
        sys.exit(1)

    _log(
        "relay_starting",
        port=settings.port,
        zulip_stream=settings.zulip_stream,
        zulip_topic=settings.zulip_topic,
    )
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
