from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from sepay_payments import ClientConfig, Credential, Transport


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    *,
    text: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if text is None:
        text = "" if json_body is None else json.dumps(json_body)
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.headers = CaseInsensitiveDict(headers or {})
    return response


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *outcomes: Union[requests.Response, Exception]) -> None:
        self.outcomes: List[Union[requests.Response, Exception]] = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.outcomes:
            raise AssertionError(f"Unexpected request {method} {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def credential() -> Credential:
    return Credential("M1", "k")


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        merchant_id="SP-TEST-001",
        secret_key="test_secret_key",
        api_base_url="https://api.test.local",
        checkout_base_url="https://pay.test.local",
    )


@pytest.fixture
def make_transport(credential, sleeper):
    def _make(*outcomes, **kwargs) -> Transport:
        session = FakeSession(*outcomes)
        kwargs.setdefault("sleep", sleeper)
        return Transport("https://api.test.local/", credential, session=session, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def _clear_sepay_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("SEPAY_"):
            monkeypatch.delenv(key, raising=False)
