"""HMAC verification of inbound check webhooks."""

import hashlib
import hmac

SIGNATURE_HEADER = "x-apollo-signature"
SIGNATURE_PREFIX = "sha256="


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` header value the orchestrator sends for *raw_body*."""
    digest = hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(raw_body: bytes, provided: str | None, secret: str) -> bool:
    """Check *provided* against the HMAC of the exact bytes received.

    The body must not be re-serialized before calling this. Comparison is
    constant-time; a missing header never verifies.
    """
    if not provided:
        return False
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(provided.encode(), expected.encode())
