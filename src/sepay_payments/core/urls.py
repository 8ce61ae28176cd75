"""
Base URLs for the SePay environments.
"""

from __future__ import annotations

from .errors import ConfigError

__all__ = [
    "PRODUCTION",
    "SANDBOX",
    "SUPPORTED_ENVIRONMENTS",
    "api_base_url",
    "checkout_base_url",
    "checkout_url",
    "is_valid_environment",
]

SANDBOX = "sandbox"
PRODUCTION = "production"

SUPPORTED_ENVIRONMENTS = (SANDBOX, PRODUCTION)

CHECKOUT_INIT_PATH = "/v1/checkout/init"

_API_BASE_URLS = {
    SANDBOX: "https://pgapi-sandbox.sepay.vn",
    PRODUCTION: "https://pgapi.sepay.vn",
}

_CHECKOUT_BASE_URLS = {
    SANDBOX: "https://pay-sandbox.sepay.vn",
    PRODUCTION: "https://pay.sepay.vn",
}


def is_valid_environment(environment: str) -> bool:
    return environment in SUPPORTED_ENVIRONMENTS


def _lookup(table: dict, environment: str) -> str:
    try:
        return table[environment]
    except KeyError as exc:
        raise ConfigError(
            f'Invalid environment "{environment}". '
            f"Must be one of: {', '.join(SUPPORTED_ENVIRONMENTS)}"
        ) from exc


def api_base_url(environment: str) -> str:
    return _lookup(_API_BASE_URLS, environment)


def checkout_base_url(environment: str) -> str:
    return _lookup(_CHECKOUT_BASE_URLS, environment)


def checkout_url(environment: str) -> str:
    """Full URL the checkout form is posted to."""
    return checkout_base_url(environment) + CHECKOUT_INIT_PATH
