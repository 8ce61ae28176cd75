"""
Basic-Auth credentials for the SePay API.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

__all__ = ["Credential", "basic_auth_header"]


def basic_auth_header(merchant_id: str, secret_key: str) -> str:
    token = base64.b64encode(f"{merchant_id}:{secret_key}".encode("utf-8"))
    return "Basic " + token.decode("ascii")


@dataclass(frozen=True)
class Credential:
    merchant_id: str
    secret_key: str = field(repr=False)

    def authorization_header(self) -> str:
        """
        Build the ``Authorization`` header value.

        Computed on every call rather than cached.
        """
        return basic_auth_header(self.merchant_id, self.secret_key)
