"""Unit tests for Outline webhook signature verification."""

import hashlib
import hmac
from unittest.mock import patch

import pytest
from outline_relay.webhooks import signatures
from outline_relay.webhooks.signatures import (
    MissingCredentialsError,
    SignatureMismatchError,
    SignatureVerificationError,
    build_outline_signature_header,
    compute_outline_signature,
    parse_signature_header,
    verify_outline_signature,
)

SECRET = "test-webhook-secret"
TIMESTAMP = "1690000000000"
BODY = b'{"event": "documents.update", "payload": {"model": {"title": "Roadmap"}}}\n'


def _sign(secret: str, timestamp: str, body: bytes) -> str:
    digest = hmac.new(
        secret.encode("utf-8"),
        timestamp.encode("utf-8") + b"." + body,
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},s={digest}"


class TestParseSignatureHeader:
    """Tests for Outline-Signature header parsing."""

    def test_basic(self):
        parsed = parse_signature_header("t=123,s=abc")
        assert parsed.timestamp == "123"
        assert parsed.signature == "abc"

    def test_order_insensitive(self):
        parsed = parse_signature_header("s=abc,t=123")
        assert parsed.timestamp == "123"
        assert parsed.signature == "abc"

    def test_whitespace_trimmed(self):
        parsed = parse_signature_header("  t = 123 ,  s= abc  ")
        assert parsed.timestamp == "123"
        assert parsed.signature == "abc"

    def test_unknown_keys_and_malformed_tokens_ignored(self):
        parsed = parse_signature_header("v=1,garbage,t=123,,s=abc,x=")
        assert parsed.timestamp == "123"
        assert parsed.signature == "abc"

    def test_last_value_wins(self):
        parsed = parse_signature_header("s=first,t=1,s=second,t=2")
        assert parsed.signature == "second"
        assert parsed.timestamp == "2"

    def test_value_keeps_extra_equals(self):
        parsed = parse_signature_header("t=1,s=ab==")
        assert parsed.signature == "ab=="

    def test_none_and_empty(self):
        assert parse_signature_header(None).signature == ""
        assert parse_signature_header("").timestamp == ""


class TestOutlineSignature:
    """Tests for Outline signature verification."""

    def test_valid_signature(self):
        """Valid signature should pass verification."""
        # Should not raise
        verify_outline_signature(
            raw_body=BODY,
            header_value=_sign(SECRET, TIMESTAMP, BODY),
            secret=SECRET,
        )

    def test_bytes_secret(self):
        verify_outline_signature(
            raw_body=BODY,
            header_value=_sign(SECRET, TIMESTAMP, BODY),
            secret=SECRET.encode("utf-8"),
        )

    def test_build_header_matches_manual(self):
        assert build_outline_signature_header(SECRET, TIMESTAMP, BODY) == _sign(
            SECRET, TIMESTAMP, BODY
        )
        digest = compute_outline_signature(SECRET, TIMESTAMP, BODY)
        assert len(digest) == 64
        assert digest == digest.lower()

    def test_tampered_body(self):
        header = _sign(SECRET, TIMESTAMP, BODY)
        tampered = BODY.replace(b"Roadmap", b"Roadmaq")
        with pytest.raises(SignatureMismatchError) as exc:
            verify_outline_signature(raw_body=tampered, header_value=header, secret=SECRET)
        assert exc.value.reason == "signature_mismatch"
        assert exc.value.service == "outline"

    def test_trailing_whitespace_is_signed(self):
        """The body is signed byte for byte, trailing newline included."""
        header = _sign(SECRET, TIMESTAMP, BODY)
        with pytest.raises(SignatureMismatchError):
            verify_outline_signature(
                raw_body=BODY.rstrip(b"\n"), header_value=header, secret=SECRET
            )

    def test_tampered_timestamp(self):
        digest = compute_outline_signature(SECRET, TIMESTAMP, BODY)
        with pytest.raises(SignatureMismatchError):
            verify_outline_signature(
                raw_body=BODY,
                header_value=f"t=1690000000001,s={digest}",
                secret=SECRET,
            )

    def test_wrong_secret(self):
        header = _sign(SECRET, TIMESTAMP, BODY)
        with pytest.raises(SignatureMismatchError):
            verify_outline_signature(
                raw_body=BODY, header_value=header, secret="test-webhook-secreT"
            )

    def test_deadbeef_rejected(self):
        with pytest.raises(SignatureMismatchError):
            verify_outline_signature(
                raw_body=BODY, header_value="t=1690000000,s=deadbeef", secret=SECRET
            )

    def test_uppercase_hex_rejected(self):
        digest = compute_outline_signature(SECRET, TIMESTAMP, BODY).upper()
        with pytest.raises(SignatureMismatchError):
            verify_outline_signature(
                raw_body=BODY,
                header_value=f"t={TIMESTAMP},s={digest}",
                secret=SECRET,
            )

    @pytest.mark.parametrize(
        "header",
        [None, "", "t=123", "s=abc", "t=,s=abc", "t=123,s=", "garbage", "v1=abc,t=123"],
    )
    def test_missing_credentials(self, header):
        """Headers without both s= and t= fail before any HMAC is computed."""
        with patch.object(signatures.hmac, "new") as hmac_new:
            with pytest.raises(MissingCredentialsError) as exc:
                verify_outline_signature(raw_body=BODY, header_value=header, secret=SECRET)
        hmac_new.assert_not_called()
        assert exc.value.reason == "missing_credentials"
        assert isinstance(exc.value, SignatureVerificationError)
