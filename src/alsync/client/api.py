"""HTTP client for the code-storage API.

This module provides:
- HTTPClient: Form-encoded POST client carrying the auth cookie
- save_code / load_code: The "method + arguments" envelope operations
- extract_code: Pulls code out of the shapes the load endpoint returns
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from alsync.core.config import ServerConfig

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"
ACCEPT = "application/json, text/javascript, */*; q=0.01"


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(APIError):
    """Non-success HTTP status, network failure, or timeout."""


class SaveRejectedError(APIError):
    """Server answered the save with a "not found" message."""


@dataclass
class HTTPResult:
    """Uniform result of a request that reached the server."""

    ok: bool
    status_code: int
    reason_phrase: str
    text: str


def encode_arguments(arguments: dict[str, Any]) -> str:
    """Encode an arguments envelope as compact JSON."""
    return json.dumps(arguments, separators=(",", ":"), ensure_ascii=False)


def extract_code(text: str) -> str | None:
    """Extract code from a load_code response body.

    Accepted shapes, in order of precedence:
    a bare JSON string, ``{"code": ...}``, a list holding an object with
    ``code``, and ``{"result": {"code": ...}}``.

    Returns:
        The code, or None if the body is not JSON or matches no shape.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None

    if isinstance(data, str):
        return data
    if isinstance(data, dict) and isinstance(data.get("code"), str):
        return str(data["code"])
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and isinstance(item.get("code"), str):
                return str(item["code"])
    if isinstance(data, dict):
        result = data.get("result")
        if isinstance(result, dict) and isinstance(result.get("code"), str):
            return str(result["code"])
    return None


def _is_not_found(text: str) -> bool:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return False
    if not isinstance(data, dict):
        return False
    message = data.get("message")
    return isinstance(message, str) and "not found" in message.lower()


class HTTPClient:
    """HTTP client for the code-storage API."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server connection settings.
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            headers={
                "content-type": FORM_CONTENT_TYPE,
                "x-requested-with": "XMLHttpRequest",
                "accept": ACCEPT,
                "referer": config.base_url,
                "cookie": f"auth={config.auth}",
            },
        )

    @property
    def config(self) -> ServerConfig:
        """Get the server configuration."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def post_form(self, path: str, fields: dict[str, str]) -> HTTPResult:
        """POST form fields and return the response, whatever its status.

        Args:
            path: Endpoint path relative to the base URL.
            fields: Form fields to URL-encode into the body.

        Returns:
            HTTPResult describing the response.

        Raises:
            TransportError: On network failure or timeout.
        """
        url = f"{self._config.base_url}{path}"
        try:
            response = self._client.post(path, data=fields)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request to {url} timed out after {self._config.timeout}s"
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        return HTTPResult(
            ok=response.is_success,
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            text=response.text,
        )

    # === Code slot operations ===

    def save_code(self, name: str, slot: int, code: str) -> str:
        """Save code into a slot.

        Args:
            name: Logical name shown in the game's code menu.
            slot: Slot number.
            code: Source code to store.

        Returns:
            Raw response text.

        Raises:
            TransportError: If the request fails or the status is not 2xx.
            SaveRejectedError: If the server reports "not found".
        """
        arguments = {"code": str(code), "slot": str(slot), "name": str(name), "log": 1}
        result = self.post_form(
            self._config.save_path,
            {"method": "save_code", "arguments": encode_arguments(arguments)},
        )

        if not result.ok:
            raise TransportError(
                f"HTTP {result.status_code} {result.reason_phrase}: "
                f"{result.text or '<empty>'}",
                result.status_code,
            )

        if _is_not_found(result.text):
            raise SaveRejectedError(
                f'Server says "Not Found" (save): {result.text[:160]}',
                result.status_code,
            )

        return result.text

    def load_code(self, slot: int) -> str | None:
        """Load the code stored in a slot, for verification.

        The load endpoint addresses slots by passing the slot number as
        the ``name`` argument.

        Args:
            slot: Slot number.

        Returns:
            The stored code, or None if it could not be determined.
        """
        arguments = {"name": str(slot), "run": "", "log": 1}
        try:
            result = self.post_form(
                self._config.verify_path,
                {"method": "load_code", "arguments": encode_arguments(arguments)},
            )
        except TransportError as e:
            logger.debug(f"load_code for slot {slot} failed: {e}")
            return None

        if not result.ok:
            logger.debug(f"load_code for slot {slot} returned HTTP {result.status_code}")
            return None

        code = extract_code(result.text)
        if code is None:
            logger.debug(f"load_code for slot {slot}: no code in response")
        return code
