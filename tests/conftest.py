from __future__ import annotations

import httpx
import pytest

from transport import ApiTransport
from utils import BASE_URL, FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend) -> ApiTransport:
    return ApiTransport(BASE_URL, timeout=1.0, transport=httpx.MockTransport(backend.handler))
