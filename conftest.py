"""Global test configuration.

Shared fixtures: a fixed credential pair and an httpx MockTransport that
records every outbound request and answers from a canned response.
"""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from ncloud_mcp.domain.value_objects.credentials import Credentials


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        self.requests: list[httpx.Request] = []
        self._status_code = status_code
        self._payload = {"ok": True} if payload is None else payload
        self._handler = handler
        super().__init__(self._serve)

    def _serve(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        if isinstance(self._payload, (str, bytes)):
            return httpx.Response(self._status_code, content=self._payload)
        return httpx.Response(
            self._status_code,
            content=json.dumps(self._payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_key="test-access-key", secret_key="test-secret-key")


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()
