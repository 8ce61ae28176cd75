import base64
import hashlib
import hmac

import pytest

from sepay_payments import SIGNED_FIELDS, SignatureGenerator, sign_fields, verify_signature
from sepay_payments.core.signature import canonical_string

SECRET = "s3cr3t-value"

PAYLOAD = {
    "merchant": "M1",
    "currency": "VND",
    "order_amount": 100000,
    "operation": "PURCHASE",
    "order_description": "x",
    "order_invoice_number": "INV1",
}


def _expected(message: str, secret: str = SECRET) -> str:
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def test_signed_field_list_is_canonical():
    assert len(SIGNED_FIELDS) == 17
    assert SIGNED_FIELDS[:3] == ("merchant", "env", "operation")
    assert SIGNED_FIELDS[-1] == "cancel_url"


def test_known_signature_matches_reference_string():
    canonical = (
        "merchant=M1,operation=PURCHASE,order_amount=100000,currency=VND,"
        "order_invoice_number=INV1,order_description=x"
    )

    assert canonical_string(PAYLOAD) == canonical
    assert sign_fields(SECRET, PAYLOAD) == _expected(canonical)


def test_signing_is_deterministic():
    assert sign_fields(SECRET, PAYLOAD) == sign_fields(SECRET, PAYLOAD)


def test_insertion_order_does_not_matter():
    reordered = dict(reversed(list(PAYLOAD.items())))

    assert list(reordered) != list(PAYLOAD)
    assert sign_fields(SECRET, reordered) == sign_fields(SECRET, PAYLOAD)


def test_fields_outside_allow_list_are_ignored():
    extended = dict(PAYLOAD, branch_code="HN01", signature="abc", foo="bar")

    assert sign_fields(SECRET, extended) == sign_fields(SECRET, PAYLOAD)


def test_present_value_changes_signature_compared_to_absent_key():
    with_customer = dict(PAYLOAD, customer_id="C1")

    assert sign_fields(SECRET, with_customer) != sign_fields(SECRET, PAYLOAD)


def test_none_values_are_skipped_but_empty_strings_are_signed():
    assert sign_fields(SECRET, dict(PAYLOAD, customer_id=None)) == sign_fields(SECRET, PAYLOAD)

    with_empty = dict(PAYLOAD, customer_id="")
    assert canonical_string(with_empty).endswith("order_description=x,customer_id=")
    assert sign_fields(SECRET, with_empty) != sign_fields(SECRET, PAYLOAD)


def test_secret_changes_signature():
    assert sign_fields("other", PAYLOAD) != sign_fields(SECRET, PAYLOAD)


def test_verify_accepts_own_signature_and_rejects_tampering():
    signature = sign_fields(SECRET, PAYLOAD)

    assert verify_signature(SECRET, PAYLOAD, signature)
    assert not verify_signature(SECRET, PAYLOAD, signature + "x")
    assert not verify_signature(SECRET, dict(PAYLOAD, order_amount=1), signature)


def test_verify_ignores_signature_key_in_fields():
    signature = sign_fields(SECRET, PAYLOAD)
    signed = dict(PAYLOAD, signature=signature)

    assert verify_signature(SECRET, signed, signature)


def test_generator_wraps_functions_and_hides_secret():
    generator = SignatureGenerator(SECRET)

    assert generator.sign(PAYLOAD) == sign_fields(SECRET, PAYLOAD)
    assert generator.verify(PAYLOAD, generator.sign(PAYLOAD))
    assert SECRET not in repr(generator)


def test_generator_hides_a_distinctive_secret():
    generator = SignatureGenerator("s3cr3t-value")

    assert "s3cr3t-value" not in repr(generator)
    assert "s3cr3t-value" not in str(generator)


@pytest.mark.parametrize("signature", [None, "", 12345, b"bytes"])
def test_verify_rejects_missing_or_non_string_signature(signature):
    assert verify_signature(SECRET, PAYLOAD, signature) is False
    assert SignatureGenerator(SECRET).verify(PAYLOAD, signature) is False
