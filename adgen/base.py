"""
Base class for generation provider adapters.

One adapter wraps one upstream backend for one media kind. It builds the
outbound request, maps the backend's response envelope onto a GenerationResult
and, for submit-then-poll backends, exposes check_status().

Adapters never retry. Every failure is raised as one of:
  AuthenticationError       — 401/403 or no secret
  TransientProviderError    — transport error, non-2xx, empty/malformed body
  TerminalGenerationFailure — the job was accepted and then reported failed
Retry and fallback policy live in the orchestrator.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx

from . import config
from .exceptions import AuthenticationError, ProviderError, TransientProviderError
from .pipeline.models import (
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
    MediaKind,
    MediaRef,
    ProviderCredential,
)

logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = {401, 403}


class ProviderAdapter(ABC):
    """Abstract base class for provider adapters."""

    name: str = ""
    media_kind: MediaKind = MediaKind.IMAGE
    asynchronous: bool = False
    label: str = ""

    def __init__(
        self,
        credential: ProviderCredential,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._credential = credential
        self._client = client
        self._timeout = timeout or config.HTTP_TIMEOUT

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, media_kind={self.media_kind.value!r})"

    @property
    def tag(self) -> str:
        return f"[{self.label or self.name}]"

    @property
    def session_key(self) -> tuple[str, str]:
        """Identifies this (provider, credential) pair without exposing the secret."""
        return (self.name, self._credential.fingerprint())

    def _secret(self) -> str:
        secret = self._credential.secret.get_secret_value()
        if not secret:
            raise AuthenticationError(self.name, "credential missing")
        return secret

    @abstractmethod
    async def submit(self, request: GenerationRequest) -> GenerationResult:
        """Start generation. Sync adapters return COMPLETED, async ones PENDING."""

    async def check_status(self, handle: str) -> GenerationResult:
        """Query an operation started by submit(). Only async adapters support this."""
        raise ProviderError(self.name, "provider is synchronous; there is no operation to check")

    # ── HTTP helpers ─────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _http(self):
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                yield client

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Perform one request and map failures onto the provider error taxonomy.
        Returns only 2xx responses.
        """
        try:
            async with self._http() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise TransientProviderError(self.name, f"network error: {type(e).__name__}") from e

        if response.status_code in AUTH_STATUS_CODES:
            raise AuthenticationError(
                self.name, f"credential rejected (HTTP {response.status_code})"
            )
        if response.is_error:
            detail = extract_error_message(response)
            raise TransientProviderError(
                self.name,
                f"HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        return response

    def _json(self, response: httpx.Response) -> Any:
        if not response.content:
            raise TransientProviderError(self.name, "empty response body")
        try:
            return response.json()
        except ValueError:
            raise TransientProviderError(self.name, "malformed response: body is not JSON") from None

    # ── Result builders ──────────────────────────────────────────────────────

    def completed(self, media: MediaRef, payload: Any = None, handle: Optional[str] = None) -> GenerationResult:
        return GenerationResult(
            status=GenerationStatus.COMPLETED,
            provider_name=self.name,
            media_kind=self.media_kind,
            media=media,
            operation_handle=handle,
            progress=100,
            raw_provider_payload=payload,
        )

    def pending(self, handle: str, payload: Any = None, progress: Optional[int] = None) -> GenerationResult:
        return GenerationResult(
            status=GenerationStatus.PENDING,
            provider_name=self.name,
            media_kind=self.media_kind,
            operation_handle=handle,
            progress=clamp_progress(progress),
            raw_provider_payload=payload,
        )

    def failed(self, error: str, payload: Any = None, handle: Optional[str] = None) -> GenerationResult:
        return GenerationResult(
            status=GenerationStatus.FAILED,
            provider_name=self.name,
            media_kind=self.media_kind,
            operation_handle=handle,
            error=error,
            raw_provider_payload=payload,
        )


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort provider error text: error / error.message / detail / msg, else body text."""
    try:
        body = response.json()
    except ValueError:
        return (response.text or response.reason_phrase or "unknown error")[:300]

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])[:300]
        for key in ("error", "detail", "msg", "message"):
            if body.get(key):
                return str(body[key])[:300]
    return str(body)[:300]


def clamp_progress(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return max(0, min(100, int(float(value))))
    except (TypeError, ValueError):
        return None


def dig(data: Any, *path, default=None):
    """Walk nested dicts/lists; returns default as soon as a step is missing."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return default
        elif not isinstance(current, dict) or step not in current:
            return default
        current = current[step]
    return current
