#!/usr/bin/env python3
"""
Send a signed Outline webhook to a running relay.

Signs a sample documents.update event (or the JSON file given with --body)
with OUTLINE_WEBHOOK_SECRET and POSTs it, so a deployment can be checked end
to end without touching Outline.

Usage:
    OUTLINE_WEBHOOK_SECRET=... python scripts/send_test_webhook.py \
        --url http://localhost:8484/outline-webhook
"""

import argparse
import json
import os
import sys
import time
from pathlib import Path

import httpx

from outline_relay.webhooks.signatures import build_outline_signature_header

SAMPLE_EVENT = {
    "event": "documents.update",
    "payload": {
        "id": "sample-delivery",
        "model": {
            "id": "sample-doc",
            "title": "Relay test document",
            "url": "/doc/relay-test-document",
            "text": "This message was sent by send_test_webhook.py\n\nIgnore me.",
            "updatedBy": {"name": "Relay test"},
        },
    },
}


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0])
    parser.add_argument(
        "--url",
        default=os.getenv("RELAY_URL", "http://localhost:8484/outline-webhook"),
    )
    parser.add_argument("--body", type=Path, help="JSON file to send instead of the sample")
    parser.add_argument(
        "--secret",
        default=os.getenv("OUTLINE_WEBHOOK_SECRET", ""),
        help="Shared secret (defaults to OUTLINE_WEBHOOK_SECRET)",
    )
    args = parser.parse_args()

    if not args.secret:
        print("No secret: pass --secret or set OUTLINE_WEBHOOK_SECRET", file=sys.stderr)
        return 2

    if args.body:
        raw_body = args.body.read_bytes()
    else:
        raw_body = json.dumps(SAMPLE_EVENT).encode("utf-8")

    header = build_outline_signature_header(
        args.secret, str(int(time.time() * 1000)), raw_body
    )

    try:
        with httpx.Client(timeout=10.0) as c:
            r = c.post(
                args.url,
                content=raw_body,
                headers={
                    "Content-Type": "application/json",
                    "Outline-Signature": header,
                },
            )
    except httpx.HTTPError as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return 1

    print(f"{r.status_code} {r.text}")
    return 0 if r.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
