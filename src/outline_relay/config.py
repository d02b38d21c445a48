from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PORT = 8484
DEFAULT_ZULIP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    zulip_webhook_url: str
    zulip_stream: str
    zulip_topic: str
    outline_webhook_secret: str
    outline_base_url: str = ""
    port: int = DEFAULT_PORT
    zulip_timeout_seconds: float = DEFAULT_ZULIP_TIMEOUT_SECONDS


def load_settings() -> Settings:
    zulip_webhook_url = (os.getenv("ZULIP_WEBHOOK_URL") or "").strip()
    zulip_stream = (os.getenv("ZULIP_STREAM") or "").strip()
    zulip_topic = (os.getenv("ZULIP_TOPIC") or "").strip()
    # Used byte for byte when signing; strip only to test presence.
    outline_webhook_secret = os.getenv("OUTLINE_WEBHOOK_SECRET") or ""

    missing = [
        name
        for name, value in [
            ("ZULIP_WEBHOOK_URL", zulip_webhook_url),
            ("ZULIP_STREAM", zulip_stream),
            ("ZULIP_TOPIC", zulip_topic),
            ("OUTLINE_WEBHOOK_SECRET", outline_webhook_secret.strip()),
        ]
        if not value
    ]
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    # Links are built as base + "/docs/...", so a trailing slash would double up.
    outline_base_url = (os.getenv("OUTLINE_BASE_URL") or "").strip().rstrip("/")

    port_raw = (os.getenv("PORT") or "").strip()
    try:
        port = int(port_raw) if port_raw else DEFAULT_PORT
    except ValueError:
        raise RuntimeError(f"PORT must be an integer (got {port_raw!r})")

    timeout_raw = (os.getenv("ZULIP_TIMEOUT_SECONDS") or "").strip()
    try:
        zulip_timeout_seconds = (
            float(timeout_raw) if timeout_raw else DEFAULT_ZULIP_TIMEOUT_SECONDS
        )
    except ValueError:
        raise RuntimeError(
            f"ZULIP_TIMEOUT_SECONDS must be a number of seconds (got {timeout_raw!r})"
        )

    return Settings(
        zulip_webhook_url=zulip_webhook_url,
        zulip_stream=zulip_stream,
        zulip_topic=zulip_topic,
        outline_webhook_secret=outline_webhook_secret,
        outline_base_url=outline_base_url,
        port=port,
        zulip_timeout_seconds=zulip_timeout_seconds,
    )
