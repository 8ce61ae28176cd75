"""
Minimal script that signs a checkout form and looks up recent orders.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from sepay_payments import CheckoutRequest, ConfigError, SePayError, create_client


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sign a SePay checkout using the SDK API")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing SEPAY_* settings",
    )
    parser.add_argument("--merchant-id", help="Merchant ID (default: SEPAY_MERCHANT_ID)")
    parser.add_argument("--secret-key", help="Secret key (default: SEPAY_SECRET_KEY)")
    parser.add_argument(
        "--environment",
        choices=("sandbox", "production"),
        help="Target environment (default: SEPAY_ENVIRONMENT or sandbox)",
    )
    parser.add_argument("--amount", type=int, default=100000, help="Order amount in VND")
    parser.add_argument(
        "--list-orders",
        action="store_true",
        help="Also list the ten most recent captured orders",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        client = create_client(
            env_file=args.env_file,
            merchant_id=args.merchant_id,
            secret_key=args.secret_key,
            environment=args.environment,
        )
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    request = CheckoutRequest(
        order_amount=args.amount,
        order_description=f"Payment for order {int(time.time())}",
        order_invoice_number=f"INV_{int(time.time())}",
        success_url="https://example.com/payment/success",
        error_url="https://example.com/payment/error",
        cancel_url="https://example.com/payment/cancel",
    )
    fields = client.checkout.generate_form_fields(request)
    logging.info("Checkout form posts to %s", client.checkout.checkout_url())
    for key, value in fields.items():
        logging.info("  %s: %s", key, value)

    if not args.list_orders:
        return 0

    try:
        orders = client.orders.list({"order_status": "CAPTURED", "per_page": 10})
    except SePayError as exc:
        logging.error("Listing orders failed (%s): %s", exc.kind.value, exc)
        return 1

    for order in orders.get("data", []):
        logging.info(
            "%s: %s %s - %s",
            order.get("order_invoice_number"),
            order.get("order_amount"),
            order.get("order_currency"),
            order.get("order_status"),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
