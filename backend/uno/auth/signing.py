"""HMAC-SHA256 signed operation envelopes.

An upstream gateway authenticates a wallet and signs each operation with
that signer's key. The room service verifies the envelope before reading
any state.

Token format: base64url(json_payload_bytes).base64url(hmac_sha256_signature)

Each signer has its own key, ``HMAC-SHA256(secret, signer)``, so a leaked
envelope key only speaks for one account.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import math

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from uno.ledger.addresses import Address
from uno.logic.exceptions import AuthorizationError
from uno.logic.types import Operation

logger = structlog.get_logger()

_TOKEN_PARTS = 2  # base64url(payload).base64url(signature)

CLOCK_SKEW_SECONDS = 60


class OperationEnvelope(BaseModel):
    """Payload carried inside a signed operation token."""

    model_config = ConfigDict(frozen=True)

    signer: Address
    room: Address
    sequence: int
    issued_at: float
    expires_at: float
    operation: Operation


def signer_key(signer: str, secret: str) -> bytes:
    """Per-signer HMAC key derived from the shared secret."""
    return hmac.new(secret.encode(), signer.encode(), hashlib.sha256).digest()


def sign_operation(envelope: OperationEnvelope, secret: str) -> str:
    """Serialize envelope to JSON, compute HMAC-SHA256, return base64url(payload).base64url(sig)."""
    payload_bytes = json.dumps(envelope.model_dump(mode="json"), sort_keys=True).encode()
    sig = hmac.new(signer_key(envelope.signer, secret), payload_bytes, hashlib.sha256).digest()
    payload_b64 = base64.urlsafe_b64encode(payload_bytes).decode()
    sig_b64 = base64.urlsafe_b64encode(sig).decode()
    return f"{payload_b64}.{sig_b64}"


def verify_operation(token: str, secret: str, *, now: float, ttl_seconds: int) -> OperationEnvelope:
    """Verify structure, signature and validity window. Raises AuthorizationError on any failure."""
    parts = token.split(".")
    if len(parts) != _TOKEN_PARTS:
        raise AuthorizationError("malformed operation token")

    try:
        payload_bytes = base64.urlsafe_b64decode(parts[0])
        provided_sig = base64.urlsafe_b64decode(parts[1])
    except (ValueError, binascii.Error):
        raise AuthorizationError("malformed operation token") from None

    try:
        data = json.loads(payload_bytes)
        signer = data["signer"]
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError, KeyError):
        raise AuthorizationError("malformed operation payload") from None
    if not isinstance(signer, str):
        raise AuthorizationError("malformed operation payload")

    expected_sig = hmac.new(signer_key(signer, secret), payload_bytes, hashlib.sha256).digest()
    if not hmac.compare_digest(provided_sig, expected_sig):
        logger.debug("operation signature mismatch", signer=signer)
        raise AuthorizationError("signature does not match signer")

    try:
        envelope = OperationEnvelope.model_validate(data)
    except ValidationError as e:
        logger.debug("operation payload invalid", errors=e.error_count())
        raise AuthorizationError("malformed operation payload") from None

    _validate_envelope_timestamps(envelope, now=now, ttl_seconds=ttl_seconds)
    return envelope


def _validate_envelope_timestamps(envelope: OperationEnvelope, *, now: float, ttl_seconds: int) -> None:
    """Validate temporal claims on an envelope.

    Checks: both timestamps are finite, issued_at is not in the future
    (with clock skew tolerance), expires_at is after issued_at, the lifetime
    does not exceed the allowed TTL, and the envelope has not expired.
    """
    if not math.isfinite(envelope.issued_at) or not math.isfinite(envelope.expires_at):
        raise AuthorizationError("operation has non-finite timestamps")
    if envelope.issued_at > now + CLOCK_SKEW_SECONDS:
        raise AuthorizationError("operation issued in the future")
    if envelope.expires_at <= envelope.issued_at:
        raise AuthorizationError("operation expires before it is issued")
    if envelope.expires_at - envelope.issued_at > ttl_seconds + CLOCK_SKEW_SECONDS:
        raise AuthorizationError("operation lifetime too long")
    if now > envelope.expires_at:
        raise AuthorizationError("operation expired")
