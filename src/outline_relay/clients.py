from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import httpx


def _log(event: str, **fields: Any) -> None:
    try:
        payload = {
            "service": "outline-relay",
            "component": "zulip_client",
            "event": event,
            **fields,
        }
        print(json.dumps(payload, default=str))
    except Exception:
        print(f"{event} {fields}")


@dataclass
class DeliveryResult:
    """Result of posting a message to Zulip."""

    success: bool
    status_code: int | None = None
    error: str | None = None


class ZulipClient:
    """Posts stream messages to a Zulip incoming-webhook URL."""

    def __init__(
        self,
        *,
        webhook_url: str,
        stream: str,
        topic: str,
        timeout_seconds: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.stream = stream
        self.topic = topic
        self.timeout_seconds = timeout_seconds
        self._http = http_client

    def _form(self, content: str) -> dict[str, str]:
        return {
            "type": "stream",
            "to": self.stream,
            "topic": self.topic,
            "content": content,
        }

    def send_message(self, content: str) -> DeliveryResult:
        """
        Send one message. Delivery problems are logged and reported in the
        result, never raised.
        """
        form = self._form(content)
        try:
            if self._http is not None:
                r = self._http.post(self.webhook_url, data=form)
            else:
                with httpx.Client(timeout=self.timeout_seconds) as c:
                    r = c.post(self.webhook_url, data=form)
        # InvalidURL is not an HTTPError subclass.
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            _log(
                "zulip_delivery_failed",
                stream=self.stream,
                topic=self.topic,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult(success=False, error=str(e))

        if r.status_code != 200:
            _log(
                "zulip_delivery_failed",
                stream=self.stream,
                topic=self.topic,
                status_code=r.status_code,
                response_preview=r.text[:200],
            )
            return DeliveryResult(
                success=False,
                status_code=r.status_code,
                error=f"unexpected_status_{r.status_code}",
            )

        _log("zulip_message_sent", stream=self.stream, topic=self.topic)
        return DeliveryResult(success=True, status_code=r.status_code)
