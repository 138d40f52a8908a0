"""HTTP session for the aiRchive REST backend.

All calls share one ``requests.Session`` so the backend's session cookie is
sent on every request after signup/login. The session is blocking; async
callers go through :meth:`ApiSession.arequest`, which runs the call on a
worker thread so the event loop keeps serving keystrokes while a request is
in flight.

Error mapping:
- No HTTP response at all (DNS, refused connection, read timeout)
  -> ApiConnectionError
- Non-2xx response -> ApiError carrying the backend's ``message``/``error``
"""

from __future__ import annotations

import asyncio
from typing import Any

import requests
from loguru import logger


class ApiError(Exception):
    """Backend answered with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, payload: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload or {}


class ApiConnectionError(Exception):
    """The request never produced an HTTP response."""


def extract_error_message(payload: Any, default: str) -> str:
    """Pick the human-readable message out of an error payload.

    The backend is not consistent: resources return ``{"message": ...}``
    while the role/topic servlets return ``{"error": ...}``.
    """
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


def _decode_body(resp: requests.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {}


class ApiSession:
    """Cookie-preserving JSON client bound to one backend base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        connect_timeout: float = 3.0,
        trust_env: bool = False,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._session = session or requests.Session()
        self._session.trust_env = trust_env
        self._session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_settings(cls, api_settings=None) -> ApiSession:
        """Build a session from ``settings.api``."""
        if api_settings is None:
            from config import settings

            api_settings = settings.api
        return cls(
            api_settings.base_url,
            timeout=api_settings.timeout,
            connect_timeout=api_settings.connect_timeout,
            trust_env=api_settings.trust_env,
        )

    @property
    def cookies(self):
        return self._session.cookies

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, json: Any = None, params: dict | None = None) -> Any:
        """Perform a blocking request and return the decoded JSON body.

        Raises:
            ApiConnectionError: transport failure
            ApiError: non-2xx response
        """
        url = self.url(path)
        try:
            resp = self._session.request(
                method,
                url,
                json=json,
                params=params,
                timeout=(self.connect_timeout, self.timeout),
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiConnectionError(str(e)) from e

        payload = _decode_body(resp)
        if not resp.ok:
            message = extract_error_message(payload, f"HTTP {resp.status_code}")
            logger.debug(f"{method} {url} -> {resp.status_code}: {message}")
            raise ApiError(message, status=resp.status_code, payload=payload if isinstance(payload, dict) else {})

        logger.trace(f"{method} {url} -> {resp.status_code}")
        return payload

    async def arequest(self, method: str, path: str, json: Any = None, params: dict | None = None) -> Any:
        return await asyncio.to_thread(self.request, method, path, json, params)

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.arequest("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.arequest("POST", path, json=json)

    def close(self) -> None:
        self._session.close()
