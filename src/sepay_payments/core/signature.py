"""
HMAC-SHA256 signing of checkout form fields.

Only the names in :data:`SIGNED_FIELDS` take part in the signature and they
are always serialized in that order, whatever order the caller built the
mapping in. API calls are authenticated separately with Basic-Auth (see
:mod:`sepay_payments.core.auth`).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Any, Mapping, Optional

__all__ = [
    "SIGNED_FIELDS",
    "SignatureGenerator",
    "canonical_string",
    "sign_fields",
    "verify_signature",
]

SIGNED_FIELDS = (
    "merchant",
    "env",
    "operation",
    "payment_method",
    "order_amount",
    "currency",
    "order_invoice_number",
    "order_description",
    "customer_id",
    "agreement_id",
    "agreement_name",
    "agreement_type",
    "agreement_payment_frequency",
    "agreement_amount_per_payment",
    "success_url",
    "error_url",
    "cancel_url",
)


def canonical_string(fields: Mapping[str, Any]) -> str:
    tokens = []
    for name in SIGNED_FIELDS:
        value = fields.get(name)
        if value is None:
            continue
        tokens.append(f"{name}={value}")
    return ",".join(tokens)


def sign_fields(secret_key: str, fields: Mapping[str, Any]) -> str:
    """Return the base64-encoded HMAC-SHA256 tag for ``fields``."""
    digest = hmac.new(
        secret_key.encode("utf-8"),
        canonical_string(fields).encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(
    secret_key: str, fields: Mapping[str, Any], signature: Optional[str]
) -> bool:
    """
    Check ``signature`` against the one computed for ``fields``.

    The comparison runs in constant time. A mismatch, including a missing or
    non-string signature, returns ``False``; the decision of what to do with
    an unauthenticated payload is left to the caller.
    """
    if not isinstance(signature, str) or not signature:
        return False
    expected = sign_fields(secret_key, fields)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


class SignatureGenerator:
    """Binds a merchant secret to :func:`sign_fields` / :func:`verify_signature`."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(secret_key=<hidden>)"

    def sign(self, fields: Mapping[str, Any]) -> str:
        return sign_fields(self._secret_key, fields)

    def verify(self, fields: Mapping[str, Any], signature: Optional[str]) -> bool:
        return verify_signature(self._secret_key, fields, signature)
