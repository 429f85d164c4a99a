import asyncio
import contextlib
import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import httpx

from orchestrator.degradation_types import ProviderResponse, SearchCancelledError
from utils.logger import get_logger

logger = get_logger(__name__)

CredentialProvider = Callable[[], str | None]


class BaseSearchClient(ABC):
    """
    Abstract base class for search provider adapters.

    Subclasses describe one endpoint; this class owns the HTTP exchange,
    bearer credentials, body parsing and cancellation. Adapters never raise
    for HTTP or transport failures: they return a ProviderResponse whose
    status is the HTTP status, or 0 when no response arrived.
    """

    provider_name = "search"

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 30.0,
        credential_provider: CredentialProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            base_url: Root URL of the search server, e.g. http://localhost:5000
            timeout_s: Per-request timeout in seconds
            credential_provider: Callable returning a bearer token or None
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.credential_provider = credential_provider
        self._transport = transport

    @property
    @abstractmethod
    def path(self) -> str:
        """Endpoint path relative to base_url."""

    @abstractmethod
    async def search(
        self, params: dict[str, str], *, cancel: asyncio.Event | None = None
    ) -> ProviderResponse:
        """Issue one request with ``params`` and return the raw outcome."""

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.credential_provider() if self.credential_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _parse_body(text: str) -> dict[str, Any] | None:
        if not text:
            return None
        try:
            data = json.loads(text)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    async def _get(self, params: dict[str, str]) -> ProviderResponse:
        url = f"{self.base_url}{self.path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning(
                "Search provider request failed before a response arrived",
                extra={
                    "extra_fields": {
                        "provider": self.provider_name,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    }
                },
            )
            return ProviderResponse(status=0, text=f"Transport error: {type(exc).__name__}: {exc}")

        text = response.text
        return ProviderResponse(status=response.status_code, text=text, payload=self._parse_body(text))

    async def _request(
        self, params: dict[str, str], cancel: asyncio.Event | None
    ) -> ProviderResponse:
        if cancel is None:
            return await self._get(params)
        if cancel.is_set():
            raise SearchCancelledError(f"{self.provider_name} request cancelled before start")

        request = asyncio.ensure_future(self._get(params))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            request.cancel()
            raise
        finally:
            waiter.cancel()

        if request in done:
            return request.result()

        request.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await request
        logger.info(
            "Search provider request cancelled",
            extra={"extra_fields": {"provider": self.provider_name}},
        )
        raise SearchCancelledError(f"{self.provider_name} request cancelled")
