"""HMAC verification for the ``x-inngest-signature`` header.

Header format is ``t=<timestamp>&s=<hex digest>``; some senders join the
parts with a comma instead. The digest is HMAC-SHA256 keyed with the
project's signing key over ``timestamp + raw_body``. Older senders signed
``timestamp + "." + raw_body``, which is still accepted.
"""

import hashlib
import hmac

import structlog

logger = structlog.get_logger()

SIGNATURE_HEADER = "x-inngest-signature"


def _digest(secret: str, message: str) -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def parse_signature_header(header: str) -> tuple[str, str] | None:
    """Return ``(timestamp, signature)`` or None if either part is missing."""
    separator = "&" if "&" in header else ","
    timestamp = signature = None
    for part in header.split(separator):
        key, _, value = part.strip().partition("=")
        if key == "t" and value:
            timestamp = value
        elif key == "s" and value:
            signature = value
    if timestamp is None or signature is None:
        return None
    return timestamp, signature


def expected_signatures(secret: str, raw_body: str, timestamp: str) -> tuple[str, str]:
    return (
        _digest(secret, timestamp + raw_body),
        _digest(secret, timestamp + "." + raw_body),
    )


def verify_signature(secret: str | None, raw_body: str, header: str | None) -> bool:
    # Projects without a signing key, or unsigned requests, are accepted as-is
    if not secret or not header:
        return True

    parsed = parse_signature_header(header)
    if parsed is None:
        logger.warning("signature_header_malformed")
        return False

    timestamp, signature = parsed
    return any(
        hmac.compare_digest(signature.encode(), candidate.encode())
        for candidate in expected_signatures(secret, raw_body, timestamp)
    )


def sign(secret: str, raw_body: str, timestamp: str) -> str:
    """Build a header value that ``verify_signature`` accepts."""
    return f"t={timestamp}&s={_digest(secret, timestamp + raw_body)}"
