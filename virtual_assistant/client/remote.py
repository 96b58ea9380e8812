"""
HTTP client for a running virtual-assistant backend.

Keeps the session cookie issued at sign-in/sign-up and sends it with every
later request, the way the browser client does.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

UNKNOWN_COMMAND = "Unknown command type."


class ClientError(Exception):
    """Request failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ClientConfig:
    """Configuration for the backend client."""

    host: str = "localhost"
    port: int = 8000
    scheme: str = "http"
    timeout: float = 30.0

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(data, dict):
        for key in ("detail", "message", "response"):
            if isinstance(data.get(key), str):
                return data[key]
    return resp.reason_phrase


class AssistantClient:
    """
    Account and command client for the backend.

    Usage:
        client = AssistantClient()
        client.sign_in("asha@example.com", "secret123")
        reply = client.ask("open calculator")
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Server connection config
            transport: Custom httpx transport (tests)
        """
        self.config = config or ClientConfig()
        self._client = httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ClientError(f"Request to {path} failed: {e}") from e

        if resp.status_code >= 400:
            raise ClientError(_error_message(resp), status_code=resp.status_code)
        return resp

    def wait_for_server(self, timeout: float = 10.0, interval: float = 0.5) -> bool:
        """
        Wait for server to be ready.

        Returns:
            True if the health check succeeded within the timeout
        """
        start = time.time()
        while time.time() - start < timeout:
            try:
                if self._client.get("/health").status_code == 200:
                    return True
            except httpx.HTTPError:
                pass
            time.sleep(interval)
        return False

    # === Account ===

    def sign_up(self, name: str, email: str, password: str) -> dict[str, Any]:
        resp = self._request(
            "POST", "/api/auth/signup",
            json={"name": name, "email": email, "password": password},
        )
        return resp.json()

    def sign_in(self, email: str, password: str) -> dict[str, Any]:
        resp = self._request(
            "POST", "/api/auth/signin",
            json={"email": email, "password": password},
        )
        return resp.json()

    def log_out(self) -> None:
        self._request("GET", "/api/auth/logout")
        self._client.cookies.clear()

    def get_current_profile(self) -> dict[str, Any]:
        return self._request("GET", "/api/user/current").json()

    def update_profile(
        self,
        assistant_name: Optional[str] = None,
        assistant_image: Optional[str] = None,
    ) -> dict[str, Any]:
        """Update assistant name and/or image URL."""
        body = {}
        if assistant_name:
            body["assistantName"] = assistant_name
        if assistant_image:
            body["assistantImage"] = assistant_image
        return self._request("POST", "/api/user/update", json=body).json()

    # === Commands ===

    def ask(self, command: str) -> Optional[dict[str, str]]:
        """
        Send a command to the assistant. The backend records it in history.

        Returns:
            ``{type, userInput, response}``, or None if the backend rejected
            the command type

        Raises:
            ClientError: On transport failure or any other error response
        """
        try:
            resp = self._request("POST", "/api/user/asktoassistant", json={"command": command})
        except ClientError as e:
            if e.status_code == 400 and str(e) == UNKNOWN_COMMAND:
                logger.warning("Backend rejected command type for %r", command)
                return None
            raise

        data = resp.json()
        if not isinstance(data, dict) or not data.get("type"):
            logger.warning("Backend returned an invalid reply: %r", data)
            return None
        return data

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "AssistantClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
