"""
Core primitives: signing, authentication, transport and resources.
"""

from .auth import Credential, basic_auth_header
from .checkout import CheckoutRequest, CheckoutResource, build_signed_fields
from .client import SePayClient
from .config import ClientConfig, ClientParameters, load_client_config
from .environment import build_environment, load_env_file
from .errors import ConfigError, ErrorKind, SePayError
from .orders import OrderResource
from .signature import SIGNED_FIELDS, SignatureGenerator, sign_fields, verify_signature
from .transport import Transport
from .urls import PRODUCTION, SANDBOX

__all__ = [
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
    "load_client_config",
    "load_env_file",
    "sign_fields",
    "verify_signature",
]
