"""
Public facade for the SePay payment-gateway client.

The most useful pieces are re-exported here so integrators can
``from sepay_payments import ...`` without navigating the package.
"""

from .api import create_client, sign_checkout_fields, verify_checkout_signature
from .core import (
    PRODUCTION,
    SANDBOX,
    SIGNED_FIELDS,
    CheckoutRequest,
    CheckoutResource,
    ClientConfig,
    ClientParameters,
    ConfigError,
    Credential,
    ErrorKind,
    OrderResource,
    SePayClient,
    SePayError,
    SignatureGenerator,
    Transport,
    basic_auth_header,
    build_environment,
    build_signed_fields,
    load_client_config,
    load_env_file,
    sign_fields,
    verify_signature,
)

__all__ = (
    "PRODUCTION",
    "SANDBOX",
    "SIGNED_FIELDS",
    "CheckoutRequest",
    "CheckoutResource",
    "ClientConfig",
    "ClientParameters",
    "ConfigError",
    "Credential",
    "ErrorKind",
    "OrderResource",
    "SePayClient",
    "SePayError",
    "SignatureGenerator",
    "Transport",
    "basic_auth_header",
    "build_environment",
    "build_signed_fields",
    "create_client",
    "load_client_config",
    "load_env_file",
    "sign_checkout_fields",
    "sign_fields",
    "verify_checkout_signature",
    "verify_signature",
)
