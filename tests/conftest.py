"""Shared fixtures for alsync tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from alsync.client.api import HTTPClient
from alsync.core.config import ServerConfig

BASE_URL = "http://test"


@pytest.fixture
def server_config() -> ServerConfig:
    """Server configuration pointing at the mocked API."""
    return ServerConfig(auth="secret-token", base_url=BASE_URL)


@pytest.fixture
def client(server_config: ServerConfig) -> Generator[HTTPClient, None, None]:
    """HTTP client for the mocked API."""
    with HTTPClient(server_config) as http_client:
        yield http_client
