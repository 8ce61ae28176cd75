"""
Command-line interface for exercising the SePay client.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Iterable, Sequence, Tuple

import requests

from .api import create_client, verify_checkout_signature
from .core.checkout import CheckoutRequest
from .core.client import SePayClient
from .core.config import load_client_config
from .core.errors import SePayError


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _key_value(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Values must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Key must not be empty")
    return key, val


def _collect_pairs(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    collected: dict[str, str] = {}
    for key, value in pairs:
        collected[key] = value
    return collected


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sepay-payments",
        description="Sign checkout forms and call the SePay payment-gateway API",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing SEPAY_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_key_value,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Python logging level (default: WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    checkout = commands.add_parser("checkout", help="Print signed checkout form fields")
    checkout.add_argument("--amount", type=int, required=True, help="Order amount in VND")
    checkout.add_argument("--description", required=True, help="Order description")
    checkout.add_argument(
        "--operation",
        default="PURCHASE",
        choices=("PURCHASE", "VERIFY"),
        help="Checkout operation (default: PURCHASE)",
    )
    checkout.add_argument("--invoice", help="Order invoice number")
    checkout.add_argument(
        "--payment-method",
        choices=("CARD", "BANK_TRANSFER", "NAPAS_BANK_TRANSFER"),
    )
    checkout.add_argument("--customer-id")
    checkout.add_argument("--success-url")
    checkout.add_argument("--error-url")
    checkout.add_argument("--cancel-url")
    checkout.add_argument("--branch-code")
    checkout.add_argument(
        "--html",
        action="store_true",
        help="Render a ready-to-embed HTML form instead of JSON",
    )

    verify = commands.add_parser(
        "verify-signature", help="Check the signature of a field set"
    )
    verify.add_argument(
        "--field",
        action="append",
        type=_key_value,
        metavar="KEY=VALUE",
        default=None,
        help="A signed field; repeat for each field",
    )
    verify.add_argument(
        "--signature",
        help="Signature to check (default: the 'signature' field)",
    )

    orders = commands.add_parser("orders", help="Order management calls")
    order_commands = orders.add_subparsers(dest="order_command", required=True)
    list_orders = order_commands.add_parser("list", help="List orders")
    list_orders.add_argument(
        "--filter",
        action="append",
        type=_key_value,
        metavar="KEY=VALUE",
        default=None,
        help="List filter such as order_status=CAPTURED; repeatable",
    )
    get_order = order_commands.add_parser("get", help="Retrieve one order")
    get_order.add_argument("order_id")
    void_order = order_commands.add_parser("void", help="Void an order's transaction")
    void_order.add_argument("invoice")
    cancel_order = order_commands.add_parser("cancel", help="Cancel an order")
    cancel_order.add_argument("invoice")
    return parser


def _run_checkout(client: SePayClient, args: argparse.Namespace) -> int:
    request = CheckoutRequest(
        order_amount=args.amount,
        order_description=args.description,
        operation=args.operation,
        order_invoice_number=args.invoice,
        payment_method=args.payment_method,
        customer_id=args.customer_id,
        success_url=args.success_url,
        error_url=args.error_url,
        cancel_url=args.cancel_url,
        branch_code=args.branch_code,
    )
    if args.html:
        print(client.checkout.generate_form_html(request))
    else:
        _print_json(
            {
                "action": client.checkout.checkout_url(),
                "fields": client.checkout.generate_form_fields(request),
            }
        )
    return 0


def _run_verify(secret_key: str, args: argparse.Namespace) -> int:
    fields = _collect_pairs(args.field or ())
    if verify_checkout_signature(fields, secret_key, args.signature):
        print("valid")
        return 0
    print("invalid")
    return 1


def _run_orders(client: SePayClient, args: argparse.Namespace) -> int:
    if args.order_command == "list":
        result = client.orders.list(_collect_pairs(args.filter or ()))
    elif args.order_command == "get":
        result = client.orders.retrieve(args.order_id)
    elif args.order_command == "void":
        result = client.orders.void_transaction(args.invoice)
    else:
        result = client.orders.cancel(args.invoice)
    _print_json(result)
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_pairs(args.set or ())

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except (SePayError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "verify-signature":
        return _run_verify(config.secret_key, args)

    client = create_client(config=config, session=requests.Session())
    try:
        if args.command == "checkout":
            return _run_checkout(client, args)
        return _run_orders(client, args)
    except SePayError as exc:
        logging.error("SePay request failed: %s", exc)
        _print_json({"error": exc.to_dict()})
        return 1
