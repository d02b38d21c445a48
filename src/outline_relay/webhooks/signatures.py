"""
Outline webhook signature verification.

Outline signs each delivery with HMAC-SHA256 and sends the result in the
Outline-Signature header:

    Outline-Signature: t=<timestamp>,s=<hex_digest>

- Signed payload: {timestamp}.{raw_body}
- Pairs are comma separated and may appear in any order

The timestamp is bound into the signature but its age is not checked.
Comparison is constant-time to prevent timing attacks.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional, Union

Secret = Union[str, bytes]


class SignatureVerificationError(Exception):
    """Raised when webhook signature verification fails."""

    def __init__(self, reason: str, service: str = "outline"):
        self.reason = reason
        self.service = service
        super().__init__(f"{service} signature verification failed: {reason}")


class MissingCredentialsError(SignatureVerificationError):
    """Signature header lacks the s= or t= field."""

    def __init__(self, service: str = "outline"):
        super().__init__("missing_credentials", service)


class SignatureMismatchError(SignatureVerificationError):
    """Supplied signature does not match the recomputed one."""

    def __init__(self, service: str = "outline"):
        super().__init__("signature_mismatch", service)


@dataclass(frozen=True)
class ParsedSignatureHeader:
    signature: str = ""
    timestamp: str = ""


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, bytes):
        return secret
    return secret.encode("utf-8")


def parse_signature_header(value: Optional[str]) -> ParsedSignatureHeader:
    """
    Parse an Outline-Signature header into its signature and timestamp.

    Tokens without "=" and keys other than "s" and "t" are skipped. When a key
    repeats, the last value wins.
    """
    signature = ""
    timestamp = ""
    for part in (value or "").split(","):
        key, sep, val = part.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key == "s":
            signature = val.strip()
        elif key == "t":
            timestamp = val.strip()
    return ParsedSignatureHeader(signature=signature, timestamp=timestamp)


def compute_outline_signature(
    secret: Secret, timestamp: str, raw_body: bytes
) -> str:
    """Return the lowercase hex HMAC-SHA256 of "{timestamp}.{raw_body}"."""
    signed_payload = timestamp.encode("utf-8") + b"." + raw_body
    return hmac.new(_secret_bytes(secret), signed_payload, hashlib.sha256).hexdigest()


def build_outline_signature_header(
    secret: Secret, timestamp: str, raw_body: bytes
) -> str:
    """Build an Outline-Signature header value for the given body."""
    digest = compute_outline_signature(secret, timestamp, raw_body)
    return f"t={timestamp},s={digest}"


def verify_outline_signature(
    *,
    raw_body: bytes,
    header_value: Optional[str],
    secret: Secret,
) -> None:
    """
    Verify an Outline webhook delivery.

    Args:
        raw_body: Request body bytes exactly as received
        header_value: Outline-Signature header (None if absent)
        secret: Shared webhook secret

    Raises:
        MissingCredentialsError: If the header lacks a signature or timestamp
        SignatureMismatchError: If the signature does not match
    """
    parsed = parse_signature_header(header_value)
    if not parsed.signature or not parsed.timestamp:
        raise MissingCredentialsError()

    expected = compute_outline_signature(secret, parsed.timestamp, raw_body)

    if not hmac.compare_digest(
        expected.encode("utf-8"), parsed.signature.encode("utf-8")
    ):
        raise SignatureMismatchError()
