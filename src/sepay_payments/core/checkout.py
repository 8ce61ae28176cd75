"""
Checkout form fields: typed request record, validation and signing.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from .errors import ErrorKind, SePayError
from .signature import SignatureGenerator
from .urls import CHECKOUT_INIT_PATH

__all__ = [
    "ALLOWED_CURRENCIES",
    "ALLOWED_OPERATIONS",
    "ALLOWED_PAYMENT_METHODS",
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "CheckoutRequest",
    "CheckoutResource",
    "build_signed_fields",
]

_LOGGER = logging.getLogger(__name__)

ALLOWED_CURRENCIES = ("VND",)
ALLOWED_OPERATIONS = ("PURCHASE", "VERIFY")
ALLOWED_PAYMENT_METHODS = ("CARD", "BANK_TRANSFER", "NAPAS_BANK_TRANSFER")

REQUIRED_FIELDS = ("currency", "order_amount", "operation", "order_description")

OPTIONAL_FIELDS = (
    "payment_method",
    "order_invoice_number",
    "customer_id",
    "success_url",
    "error_url",
    "cancel_url",
    "branch_code",
    "agreement_id",
    "agreement_name",
    "agreement_type",
    "agreement_payment_frequency",
    "agreement_amount_per_payment",
)

_INVOICE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_INVOICE_MAX_LENGTH = 100
_INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")

CheckoutPayload = Union["CheckoutRequest", Mapping[str, Any]]


def _validation_error(message: str, field: Optional[str] = None) -> SePayError:
    return SePayError(
        message,
        kind=ErrorKind.VALIDATION,
        status_code=400,
        validation_errors={field: [message]} if field else None,
    )


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class CheckoutRequest:
    """
    Typed checkout order.

    Construction applies the per-field rules; cross-field rules (operation
    vs. amount, invoice required for purchases) run in
    :func:`build_signed_fields`.
    """

    order_amount: int
    order_description: str
    operation: str = "PURCHASE"
    currency: str = "VND"
    merchant: Optional[str] = None
    payment_method: Optional[str] = None
    order_invoice_number: Optional[str] = None
    customer_id: Optional[str] = None
    success_url: Optional[str] = None
    error_url: Optional[str] = None
    cancel_url: Optional[str] = None
    branch_code: Optional[str] = None
    agreement_id: Optional[str] = None
    agreement_name: Optional[str] = None
    agreement_type: Optional[str] = None
    agreement_payment_frequency: Optional[str] = None
    agreement_amount_per_payment: Optional[int] = None

    def __post_init__(self) -> None:
        if self.merchant is not None and not self.merchant:
            raise _validation_error("Merchant ID is required", "merchant")
        if self.order_amount < 0:
            raise _validation_error(
                "Order amount must be greater than or equal to 0", "order_amount"
            )
        if self.currency not in ALLOWED_CURRENCIES:
            raise _validation_error(
                "Currency must be one of: " + ", ".join(ALLOWED_CURRENCIES), "currency"
            )
        if self.operation not in ALLOWED_OPERATIONS:
            raise _validation_error(
                "Operation must be one of: " + ", ".join(ALLOWED_OPERATIONS), "operation"
            )
        if self.payment_method is not None and self.payment_method not in ALLOWED_PAYMENT_METHODS:
            raise _validation_error(
                "Payment method must be one of: " + ", ".join(ALLOWED_PAYMENT_METHODS),
                "payment_method",
            )
        if not self.order_description:
            raise _validation_error("Order description is required", "order_description")
        if self.order_invoice_number is not None:
            self._check_invoice_number(self.order_invoice_number)
        for name in ("success_url", "error_url", "cancel_url"):
            value = getattr(self, name)
            if value is not None and not _is_http_url(value):
                label = name.split("_")[0].capitalize()
                raise _validation_error(f"{label} URL must be a valid URL", name)

    @staticmethod
    def _check_invoice_number(value: str) -> None:
        if not value:
            raise _validation_error(
                "Order invoice number cannot be empty", "order_invoice_number"
            )
        if not _INVOICE_PATTERN.match(value):
            raise _validation_error(
                "Order invoice number can only contain letters, numbers, "
                "underscores, and hyphens",
                "order_invoice_number",
            )
        if len(value) > _INVOICE_MAX_LENGTH:
            raise _validation_error(
                f"Order invoice number cannot exceed {_INVOICE_MAX_LENGTH} characters",
                "order_invoice_number",
            )

    def as_fields(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _as_mapping(payload: CheckoutPayload) -> Dict[str, Any]:
    if isinstance(payload, CheckoutRequest):
        return payload.as_fields()
    return dict(payload)


def _amount(value: Any) -> int:
    """Whole-dong amount; fractional values are rejected, never truncated."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    raise _validation_error("Order amount must be an integer", "order_amount")


def _validate(data: Mapping[str, Any]) -> int:
    if _is_blank(data.get("merchant")):
        raise _validation_error("Required field 'merchant' is missing or empty", "merchant")

    for name in REQUIRED_FIELDS:
        if _is_blank(data.get(name)):
            raise _validation_error(f"Required field '{name}' is missing or empty", name)

    if data["currency"] not in ALLOWED_CURRENCIES:
        raise _validation_error("Only VND currency is supported", "currency")

    operation = data["operation"]
    if operation not in ALLOWED_OPERATIONS:
        raise _validation_error("Operation must be PURCHASE or VERIFY", "operation")

    payment_method = data.get("payment_method")
    if payment_method is not None and payment_method not in ALLOWED_PAYMENT_METHODS:
        raise _validation_error(
            "Payment method must be one of: " + ", ".join(ALLOWED_PAYMENT_METHODS),
            "payment_method",
        )

    amount = _amount(data["order_amount"])
    if operation == "PURCHASE":
        if _is_blank(data.get("order_invoice_number")):
            raise _validation_error(
                "Order invoice number is required for PURCHASE operation",
                "order_invoice_number",
            )
        if amount <= 0:
            raise _validation_error(
                "Order amount must be greater than 0 for PURCHASE operation",
                "order_amount",
            )
    elif amount != 0:
        raise _validation_error("Order amount must be 0 for VERIFY operation", "order_amount")
    return amount


def _project(data: Mapping[str, Any]) -> Dict[str, str]:
    fields = {
        "merchant": str(data["merchant"]),
        "currency": str(data["currency"]),
        "order_amount": str(data["order_amount"]),
        "operation": str(data["operation"]),
        "order_description": str(data["order_description"]),
    }
    for name in OPTIONAL_FIELDS:
        value = data.get(name)
        if not _is_blank(value):
            fields[name] = str(value)
    return fields


def build_signed_fields(
    payload: CheckoutPayload,
    signer: SignatureGenerator,
    default_merchant_id: Optional[str] = None,
) -> Dict[str, str]:
    """
    Validate ``payload`` and return the form fields to submit, ``signature``
    included.

    ``default_merchant_id`` fills in ``merchant`` when the payload has none.
    Raises :class:`SePayError` with kind ``VALIDATION`` on bad input.
    """
    data = _as_mapping(payload)
    if _is_blank(data.get("merchant")) and default_merchant_id:
        data["merchant"] = default_merchant_id

    data["order_amount"] = _validate(data)
    fields = _project(data)
    fields["signature"] = signer.sign(fields)
    return fields


class CheckoutResource:
    """
    Produces signed checkout forms for the hosted payment page.
    """

    def __init__(
        self,
        signer: SignatureGenerator,
        checkout_base_url: str,
        *,
        merchant_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.signer = signer
        self.checkout_base_url = checkout_base_url.rstrip("/")
        self.merchant_id = merchant_id
        self.logger = logger or _LOGGER

    def checkout_url(self) -> str:
        return self.checkout_base_url + CHECKOUT_INIT_PATH

    def generate_form_fields(self, payload: CheckoutPayload) -> Dict[str, str]:
        self.logger.info("SePay API: Generate Checkout Form Fields")
        return build_signed_fields(payload, self.signer, self.merchant_id)

    def verify_signature(self, fields: Mapping[str, Any], signature: Optional[str]) -> bool:
        return self.signer.verify(fields, signature)

    def generate_form_html(
        self,
        payload: CheckoutPayload,
        attributes: Optional[Mapping[str, Any]] = None,
        *,
        submit_button: bool = True,
    ) -> str:
        """
        Render an HTML ``<form>`` posting the signed fields to the checkout page.
        """
        fields = self.generate_form_fields(payload)
        form_attributes: Dict[str, Any] = {"method": "POST", "action": self.checkout_url()}
        form_attributes.update(attributes or {})

        opening = "".join(
            f' {html.escape(str(key))}="{html.escape(str(value))}"'
            for key, value in form_attributes.items()
        )
        lines = [f"<form{opening}>"]
        for name, value in fields.items():
            lines.append(
                f'    <input type="hidden" name="{html.escape(name)}" '
                f'value="{html.escape(value)}">'
            )
        if submit_button:
            lines.append('    <button type="submit">Proceed to Payment</button>')
        lines.append("</form>")
        return "\n".join(lines)

    @staticmethod
    def generate_auto_submit_script(form_id: str = "sepay-checkout-form") -> str:
        return f'<script>document.getElementById("{html.escape(form_id)}").submit();</script>'
