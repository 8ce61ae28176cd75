"""
Public, high-level helpers for interacting with the SePay gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .core.checkout import CheckoutPayload, build_signed_fields
from .core.client import SePayClient
from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.signature import SignatureGenerator, verify_signature

__all__ = [
    "create_client",
    "sign_checkout_fields",
    "verify_checkout_signature",
]


def create_client(
    *,
    config: Optional[ClientConfig] = None,
    session: Optional[requests.Session] = None,
    logger: Optional[logging.Logger] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    merchant_id: Optional[str] = None,
    secret_key: Optional[str] = None,
    environment: Optional[str] = None,
    api_base_url: Optional[str] = None,
    checkout_base_url: Optional[str] = None,
    timeout: Optional[float | int | str] = None,
    retry_attempts: Optional[int | str] = None,
    retry_delay_ms: Optional[int | str] = None,
    user_agent: Optional[str] = None,
) -> SePayClient:
    """
    Construct a :class:`SePayClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from environment data and keyword arguments.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            merchant_id,
            secret_key,
            environment,
            api_base_url,
            checkout_base_url,
            timeout,
            retry_attempts,
            retry_delay_ms,
            user_agent,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_client_config(
            env_file=env_file,
            overrides=overrides,
            base=base,
            parameters=parameters,
            merchant_id=merchant_id,
            secret_key=secret_key,
            environment=environment,
            api_base_url=api_base_url,
            checkout_base_url=checkout_base_url,
            timeout=timeout,
            retry_attempts=retry_attempts,
            retry_delay_ms=retry_delay_ms,
            user_agent=user_agent,
        )
    return SePayClient(cfg, session=session, logger=logger)


def sign_checkout_fields(
    payload: CheckoutPayload,
    secret_key: str,
    *,
    merchant_id: Optional[str] = None,
) -> Dict[str, str]:
    """
    Validate and sign a checkout payload without building a client.
    """
    return build_signed_fields(payload, SignatureGenerator(secret_key), merchant_id)


def verify_checkout_signature(
    fields: Mapping[str, Any],
    secret_key: str,
    signature: Optional[str] = None,
) -> bool:
    """
    Check a signed field set, e.g. one posted back to a merchant endpoint.

    ``signature`` defaults to ``fields["signature"]``.
    """
    if signature is None:
        signature = fields.get("signature")
    if not signature:
        return False
    return verify_signature(secret_key, fields, str(signature))
