"""
HTTP client for the ingest service.

Two endpoints on the ingest host:
    POST /api/auth  {packageName, password, isNewAccount} -> {token}
    POST /api/log   {logs: [...]} with optional Bearer token

Failures are raised as the exceptions in ``remote_logger.errors``; callers
decide what they mean for session state.
"""

import json
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .entry import LogEntry
from .errors import (
    AuthRejected,
    AuthTransportFault,
    DeliveryRejected,
    DeliveryTransportFault,
    DeliveryUnauthorized,
)

logger = logging.getLogger(__name__)

AUTH_PATH = "/api/auth"
LOG_PATH = "/api/log"

# Set while a request to the ingest host is in progress in the current context.
_ingest_call: ContextVar[bool] = ContextVar("remote_logger_ingest_call", default=False)


def in_ingest_call() -> bool:
    """True when the caller runs inside an ingest request (auth or log)."""
    return _ingest_call.get()


@contextmanager
def _marked_ingest_call() -> Iterator[None]:
    reset = _ingest_call.set(True)
    try:
        yield
    finally:
        _ingest_call.reset(reset)


class AuthRequest(BaseModel):
    """Body of the auth handshake."""

    model_config = ConfigDict(populate_by_name=True)

    package_name: str = Field(alias="packageName")
    password: str
    is_new_account: bool = Field(default=False, alias="isNewAccount")


class AuthResponse(BaseModel):
    """Successful auth answer; anything without a token is malformed."""

    token: str = Field(min_length=1)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of the ``error`` field from a failure body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:256] or response.reason_phrase
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.reason_phrase


class IngestClient:
    """Async wrapper around ``httpx.AsyncClient`` for the ingest endpoints."""

    def __init__(
        self,
        ingest_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.ingest_url = ingest_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None  # Track if we created the client

    async def authenticate(self, package_name: str, password: str, is_new_account: bool = False) -> str:
        """
        Exchange credentials for a bearer token.

        Raises:
            AuthRejected: non-2xx answer from the auth endpoint
            AuthTransportFault: network failure or malformed success body
        """
        body = AuthRequest(
            package_name=package_name,
            password=password,
            is_new_account=is_new_account,
        ).model_dump(by_alias=True)

        try:
            with _marked_ingest_call():
                response = await self._client.post(f"{self.ingest_url}{AUTH_PATH}", json=body)
        except httpx.HTTPError as e:
            raise AuthTransportFault(f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise AuthRejected(_error_detail(response), status_code=response.status_code)

        try:
            return AuthResponse.model_validate_json(response.content).token
        except ValidationError as e:
            raise AuthTransportFault(f"Malformed auth response: {e.error_count()} error(s)") from e

    async def submit(self, entries: Sequence[LogEntry], token: str | None = None) -> None:
        """
        Post one batch of entries.

        Raises:
            DeliveryUnauthorized: HTTP 401, token invalid or expired
            DeliveryRejected: any other non-2xx answer
            DeliveryTransportFault: network failure
        """
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        payload: dict[str, Any] = {"logs": [entry.to_dict() for entry in entries]}
        content = json.dumps(payload, default=str).encode("utf-8")

        try:
            with _marked_ingest_call():
                response = await self._client.post(f"{self.ingest_url}{LOG_PATH}", content=content, headers=headers)
        except httpx.HTTPError as e:
            raise DeliveryTransportFault(f"{type(e).__name__}: {e}") from e

        if response.status_code == 401:
            raise DeliveryUnauthorized(response.reason_phrase or "Unauthorized", status_code=401)
        if not response.is_success:
            raise DeliveryRejected(response.reason_phrase or _error_detail(response), status_code=response.status_code)

        logger.debug(f"[RemoteLogger] Delivered batch of {len(entries)} entries")

    async def aclose(self):
        """Close the underlying HTTP client if we created it."""
        if self._owns_client:
            await self._client.aclose()
