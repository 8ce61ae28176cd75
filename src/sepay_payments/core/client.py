"""
Entry point object bundling configuration, transport and resource handles.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Mapping, Optional

import requests

from .checkout import CheckoutPayload, CheckoutResource
from .config import ClientConfig
from .orders import OrderResource
from .signature import SignatureGenerator
from .transport import Transport

__all__ = ["SePayClient"]


class SePayClient:
    """
    Thin wrapper around the SePay API resources.

    All handles are built up front from the immutable :class:`ClientConfig`,
    so a client can be shared between threads without further locking.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.logger = logger
        self.transport = Transport.from_config(config, session=self.session, logger=logger)
        self.orders = OrderResource(self.transport, logger=logger)
        self.checkout = CheckoutResource(
            SignatureGenerator(config.secret_key),
            config.resolved_checkout_base_url,
            merchant_id=config.merchant_id,
            logger=logger,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(merchant_id={self.config.merchant_id!r}, "
            f"environment={self.config.environment!r})"
        )

    @property
    def merchant_id(self) -> str:
        return self.config.merchant_id

    @property
    def environment(self) -> str:
        return self.config.environment

    @property
    def api_base_url(self) -> str:
        return self.config.resolved_api_base_url

    @property
    def checkout_base_url(self) -> str:
        return self.config.resolved_checkout_base_url

    def with_options(self, **changes: Any) -> "SePayClient":
        """
        Return a new client whose config has ``changes`` applied.

        The current client is left untouched; the HTTP session is shared.
        """
        config = dataclasses.replace(self.config, **changes)
        return type(self)(config, session=self.session, logger=self.logger)

    def checkout_fields(self, payload: CheckoutPayload) -> Dict[str, str]:
        return self.checkout.generate_form_fields(payload)

    def verify_signature(self, fields: Mapping[str, Any], signature: str) -> bool:
        return self.checkout.verify_signature(fields, signature)
