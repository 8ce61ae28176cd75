"""
HTTP transport for the SePay API.

Every call is authenticated with Basic-Auth, bounded by a per-attempt
timeout and retried with a fixed delay when the failure is transient
(no response at all, ``429`` or ``5xx``). Terminal failures are raised as
:class:`~sepay_payments.core.errors.SePayError` tagged with an
:class:`~sepay_payments.core.errors.ErrorKind`.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from .auth import Credential
from .config import (
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ClientConfig,
)
from .errors import ErrorKind, SePayError, classify_status

__all__ = ["Transport"]

_LOGGER = logging.getLogger(__name__)

API_VERSION_PREFIX = "/v1/"

# Connection-level failures: no usable response arrived.
_NO_RESPONSE_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)


def _sanitize(options: Mapping[str, Any]) -> Dict[str, Any]:
    sanitized = dict(options)
    headers = sanitized.get("headers")
    if headers:
        sanitized["headers"] = {
            key: value for key, value in headers.items() if key.lower() != "authorization"
        }
    return sanitized


def _parse_retry_after(response: requests.Response) -> Optional[int]:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _error_from_response(response: requests.Response) -> SePayError:
    status_code = response.status_code
    text = response.text or ""
    message = text or f"HTTP {status_code}"
    details: Any = None
    error_code: Optional[str] = None
    validation_errors: Dict[str, Any] = {}

    try:
        data = json.loads(text) if text else None
    except ValueError:
        data = None

    if isinstance(data, dict):
        details = data
        if data.get("message"):
            message = str(data["message"])
        raw_code = data.get("error_code", data.get("code"))
        if raw_code is not None:
            error_code = str(raw_code)
        errors = data.get("errors")
        if isinstance(errors, dict):
            validation_errors = {
                key: value if isinstance(value, list) else [value]
                for key, value in errors.items()
            }
    elif data is not None:
        details = data

    kind = classify_status(status_code)
    return SePayError(
        message,
        kind=kind,
        status_code=status_code,
        details=details,
        error_code=error_code,
        validation_errors=validation_errors,
        retry_after=_parse_retry_after(response) if kind is ErrorKind.RATE_LIMIT else None,
    )


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code == 429


class Transport:
    """
    Executes requests against ``{base_url}/v1/{path}``.

    The instance holds no per-call state, so one transport can serve many
    callers concurrently as long as the underlying session can.
    """

    def __init__(
        self,
        base_url: str,
        credential: Credential,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay_ms = retry_delay_ms
        self.user_agent = user_agent
        self.session = session or requests.Session()
        self.logger = logger or _LOGGER
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "Transport":
        return cls(
            config.resolved_api_base_url,
            config.credential,
            timeout=config.timeout,
            retry_attempts=config.retry_attempts,
            retry_delay_ms=config.retry_delay_ms,
            user_agent=config.user_agent,
            session=session,
            logger=logger,
            sleep=sleep,
        )

    def build_url(self, path: str) -> str:
        return self.base_url + API_VERSION_PREFIX + path.lstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.credential.authorization_header(),
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def get(self, path: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        return self.execute("GET", path, query=query)

    def post(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return self.execute("POST", path, body=dict(body or {}))

    def put(self, path: str, body: Optional[Mapping[str, Any]] = None) -> Any:
        return self.execute("PUT", path, body=dict(body or {}))

    def delete(self, path: str) -> Any:
        return self.execute("DELETE", path)

    def execute(
        self,
        method: str,
        path: str,
        *,
        query: Optional[Mapping[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> Any:
        """
        Perform ``method`` on ``path`` and return the decoded JSON body.

        Raises :class:`SePayError` once the call can no longer succeed.
        """
        method = method.upper()
        url = self.build_url(path)
        attempt = 0

        while True:
            attempt += 1
            options: Dict[str, Any] = {"headers": self._headers(), "timeout": self.timeout}
            if query:
                options["params"] = dict(query)
            if body is not None:
                options["json"] = body

            self.logger.debug(
                "SePay API request %s %s (attempt %d)",
                method,
                url,
                attempt,
                extra={
                    "method": method,
                    "url": url,
                    "attempt": attempt,
                    "options": _sanitize(options),
                },
            )

            try:
                response = self.session.request(method, url, **options)
            except _NO_RESPONSE_ERRORS as exc:
                self.logger.error(
                    "SePay API request failed: %s %s (attempt %d): %s",
                    method,
                    url,
                    attempt,
                    exc,
                )
                if attempt >= self.retry_attempts:
                    raise SePayError(
                        f"HTTP request failed: {exc}",
                        kind=ErrorKind.GENERIC,
                    ) from exc
                self._wait()
                continue
            except requests.RequestException as exc:
                self.logger.error("SePay API HTTP error: %s %s: %s", method, url, exc)
                raise SePayError(
                    f"HTTP request failed: {exc}",
                    kind=ErrorKind.GENERIC,
                ) from exc

            self.logger.debug(
                "SePay API response %s %s -> %d",
                method,
                url,
                response.status_code,
            )

            if response.status_code < 400:
                return self._decode(response, url)

            error = _error_from_response(response)
            self.logger.error(
                "SePay API request failed: %s %s (attempt %d): HTTP %d %s",
                method,
                url,
                attempt,
                response.status_code,
                error.message,
            )
            if attempt >= self.retry_attempts or not _is_retryable_status(
                response.status_code
            ):
                raise error
            self._wait()

    def _wait(self) -> None:
        self._sleep(self.retry_delay_ms / 1000.0)

    @staticmethod
    def _decode(response: requests.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise SePayError(
                f"Invalid JSON response from {url}: {exc}",
                kind=ErrorKind.GENERIC,
                status_code=response.status_code,
                details=response.text,
            ) from exc
