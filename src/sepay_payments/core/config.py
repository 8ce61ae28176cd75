"""
Configuration objects and helpers for the SePay client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from . import urls
from .auth import Credential
from .environment import build_environment
from .errors import ConfigError

__all__ = [
    "DEFAULT_RETRY_ATTEMPTS",
    "DEFAULT_RETRY_DELAY_MS",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "ClientConfig",
    "ClientParameters",
    "load_client_config",
]

DEFAULT_TIMEOUT = 30
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_USER_AGENT = "sepay-python/0.1.0"

_PARAMETER_TO_ENV_KEY = {
    "merchant_id": "SEPAY_MERCHANT_ID",
    "secret_key": "SEPAY_SECRET_KEY",
    "environment": "SEPAY_ENVIRONMENT",
    "api_base_url": "SEPAY_API_BASE_URL",
    "checkout_base_url": "SEPAY_CHECKOUT_BASE_URL",
    "timeout": "SEPAY_TIMEOUT",
    "retry_attempts": "SEPAY_RETRY_ATTEMPTS",
    "retry_delay_ms": "SEPAY_RETRY_DELAY_MS",
    "user_agent": "SEPAY_USER_AGENT",
}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_client_config`.
    """

    merchant_id: Optional[str] = None
    secret_key: Optional[str] = field(default=None, repr=False)
    environment: Optional[str] = None
    api_base_url: Optional[str] = None
    checkout_base_url: Optional[str] = None
    timeout: Optional[float | int | str] = None
    retry_attempts: Optional[int | str] = None
    retry_delay_ms: Optional[int | str] = None
    user_agent: Optional[str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = _stringify(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[ClientParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = _stringify(value)
    return overrides


def _require(values: Mapping[str, str], key: str) -> str:
    value = (values.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} must be provided")
    return value


def _normalize_base_url(raw_url: str, key: str) -> str:
    value = raw_url.strip().rstrip("/")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"{key} must be an absolute http(s) URL, got '{raw_url}'")
    return value


def _parse_number(raw: str, key: str, cast) -> Any:
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number, got '{raw}'") from exc


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings shared by the transport and every resource handle.

    ``api_base_url`` and ``checkout_base_url`` are optional overrides; when
    left as ``None`` the URLs of ``environment`` apply. Use
    :func:`dataclasses.replace` to derive a modified copy.
    """

    merchant_id: str
    secret_key: str = field(repr=False)
    environment: str = urls.SANDBOX
    api_base_url: Optional[str] = None
    checkout_base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.merchant_id:
            raise ConfigError("merchant_id must not be empty")
        if not self.secret_key:
            raise ConfigError("secret_key must not be empty")
        if not urls.is_valid_environment(self.environment):
            raise ConfigError(
                f'Invalid environment "{self.environment}". '
                f"Must be one of: {', '.join(urls.SUPPORTED_ENVIRONMENTS)}"
            )
        if self.timeout <= 0:
            raise ConfigError("timeout must be greater than zero")
        if self.retry_attempts < 1:
            raise ConfigError("retry_attempts must be at least 1")
        if self.retry_delay_ms < 0:
            raise ConfigError("retry_delay_ms must not be negative")

        for name in ("api_base_url", "checkout_base_url"):
            value = getattr(self, name)
            if value:
                object.__setattr__(self, name, _normalize_base_url(value, name))
            else:
                object.__setattr__(self, name, None)

    @property
    def credential(self) -> Credential:
        return Credential(self.merchant_id, self.secret_key)

    @property
    def resolved_api_base_url(self) -> str:
        return self.api_base_url or urls.api_base_url(self.environment)

    @property
    def resolved_checkout_base_url(self) -> str:
        return self.checkout_base_url or urls.checkout_base_url(self.environment)

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        merchant_id = _require(values, "SEPAY_MERCHANT_ID")
        secret_key = _require(values, "SEPAY_SECRET_KEY")
        environment = (values.get("SEPAY_ENVIRONMENT") or urls.SANDBOX).strip().lower()

        timeout = _parse_number(
            values.get("SEPAY_TIMEOUT", str(DEFAULT_TIMEOUT)), "SEPAY_TIMEOUT", float
        )
        retry_attempts = _parse_number(
            values.get("SEPAY_RETRY_ATTEMPTS", str(DEFAULT_RETRY_ATTEMPTS)),
            "SEPAY_RETRY_ATTEMPTS",
            int,
        )
        retry_delay_ms = _parse_number(
            values.get("SEPAY_RETRY_DELAY_MS", str(DEFAULT_RETRY_DELAY_MS)),
            "SEPAY_RETRY_DELAY_MS",
            int,
        )
        user_agent = values.get("SEPAY_USER_AGENT") or DEFAULT_USER_AGENT

        return cls(
            merchant_id=merchant_id,
            secret_key=secret_key,
            environment=environment,
            api_base_url=values.get("SEPAY_API_BASE_URL") or None,
            checkout_base_url=values.get("SEPAY_CHECKOUT_BASE_URL") or None,
            timeout=timeout,
            retry_attempts=retry_attempts,
            retry_delay_ms=retry_delay_ms,
            user_agent=user_agent,
        )

    @classmethod
    def from_env(
        cls,
        *,
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
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "merchant_id": merchant_id,
                "secret_key": secret_key,
                "environment": environment,
                "api_base_url": api_base_url,
                "checkout_base_url": checkout_base_url,
                "timeout": timeout,
                "retry_attempts": retry_attempts,
                "retry_delay_ms": retry_delay_ms,
                "user_agent": user_agent,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        variables = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(variables)


def load_client_config(
    *,
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
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can be provided entirely through environment variables,
    a ``.env`` file, direct keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
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
