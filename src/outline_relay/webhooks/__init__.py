"""
Webhook handling for the Outline relay.

This module provides Outline signature verification and the router that
receives Outline document events.
"""

from outline_relay.webhooks.signatures import (
    MissingCredentialsError,
    SignatureMismatchError,
    SignatureVerificationError,
    build_outline_signature_header,
    compute_outline_signature,
    parse_signature_header,
    verify_outline_signature,
)

__all__ = [
    "verify_outline_signature",
    "parse_signature_header",
    "compute_outline_signature",
    "build_outline_signature_header",
    "SignatureVerificationError",
    "MissingCredentialsError",
    "SignatureMismatchError",
]
