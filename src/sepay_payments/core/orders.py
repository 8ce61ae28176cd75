"""
Order endpoints of the SePay API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .errors import ErrorKind, SePayError
from .transport import Transport

__all__ = ["ORDER_LIST_FILTERS", "OrderResource"]

_LOGGER = logging.getLogger(__name__)

ORDER_LIST_FILTERS = (
    "per_page",
    "q",
    "customer_id",
    "order_status",
    "created_at",
    "from_created_at",
    "to_created_at",
    "sort",
)


def _require(value: str, message: str) -> None:
    if not value:
        raise SePayError(message, kind=ErrorKind.VALIDATION, status_code=400)


class OrderResource:
    endpoint = "order"

    def __init__(self, transport: Transport, *, logger: Optional[logging.Logger] = None) -> None:
        self.transport = transport
        self.logger = logger or _LOGGER

    def list(self, filters: Optional[Mapping[str, Any]] = None) -> Any:
        """
        List orders. Unknown filter names and empty values are dropped.
        """
        params: Dict[str, Any] = {
            key: value
            for key, value in (filters or {}).items()
            if key in ORDER_LIST_FILTERS and value is not None and value != ""
        }
        self.logger.info("SePay API: List Orders %s", params)
        return self.transport.get(self.endpoint, params)

    def retrieve(self, order_id: str) -> Any:
        _require(order_id, "Order ID is required")
        self.logger.info("SePay API: Retrieve Order %s", order_id)
        return self.transport.get(f"{self.endpoint}/detail/{order_id}")

    def void_transaction(self, order_invoice_number: str) -> Any:
        _require(order_invoice_number, "Order invoice number is required")
        self.logger.info("SePay API: Void Transaction %s", order_invoice_number)
        return self.transport.post(
            f"{self.endpoint}/voidTransaction",
            {"order_invoice_number": order_invoice_number},
        )

    def cancel(self, order_invoice_number: str) -> Any:
        _require(order_invoice_number, "Order invoice number is required")
        self.logger.info("SePay API: Cancel Order %s", order_invoice_number)
        return self.transport.post(
            f"{self.endpoint}/cancel",
            {"order_invoice_number": order_invoice_number},
        )
