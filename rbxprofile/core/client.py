"""httpx-based upstream client for the Roblox public APIs."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from rbxprofile.config import AggregatorConfig
from rbxprofile.core.endpoints import Endpoint, TimeoutClass
from rbxprofile.exceptions import RateLimitedError, UpstreamUnavailableError
from rbxprofile.logging import get_logger


class FailureKind(str, Enum):
    """Classification of a failed upstream call."""
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    NETWORK = "network"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass
class UpstreamResult:
    """Result of a single upstream call: a payload or a classified failure."""

    endpoint: str
    ok: bool
    payload: Any = None
    failure: FailureKind | None = None
    status_code: int | None = None
    error: str | None = None
    detail: Any = None
    retry_after_seconds: int = 30

    @classmethod
    def success(cls, endpoint: str, payload: Any, status_code: int | None = None) -> "UpstreamResult":
        return cls(endpoint=endpoint, ok=True, payload=payload, status_code=status_code)

    @classmethod
    def failed(
        cls,
        endpoint: str,
        failure: FailureKind,
        error: str,
        status_code: int | None = None,
        detail: Any = None,
    ) -> "UpstreamResult":
        return cls(
            endpoint=endpoint,
            ok=False,
            failure=failure,
            error=error,
            status_code=status_code,
            detail=detail,
        )

    @property
    def is_rate_limited(self) -> bool:
        """Timeouts and HTTP 429 both point at upstream throttling."""
        return self.failure == FailureKind.TIMEOUT or self.status_code == 429

    def raise_for_failure(self) -> Any:
        """
        Return the payload, or raise the matching request-level error.

        Only used for hard-dependency calls; enrichment calls fall back to
        defaults instead.

        Raises:
            RateLimitedError: On timeout or HTTP 429
            UpstreamUnavailableError: On any other failure
        """
        if self.ok:
            return self.payload
        if self.is_rate_limited:
            raise RateLimitedError(
                "Roblox API rate limit exceeded",
                details="Please try again in a few moments",
                retry_after_seconds=self.retry_after_seconds,
            )
        raise UpstreamUnavailableError(
            f"Roblox API call '{self.endpoint}' failed: {self.error}",
            details=self.detail,
            upstream_status=self.status_code,
        )


class UpstreamClient:
    """
    Issues single, non-retried calls against the Roblox APIs.

    Every request carries the configured User-Agent and a per-call timeout
    taken from the endpoint's timeout class. Failures are returned as
    ``UpstreamResult`` values instead of raised.

    Example:
        async with UpstreamClient(config) as client:
            result = await client.call(USER_DETAILS, user_id=156)
    """

    def __init__(
        self,
        config: AggregatorConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or AggregatorConfig()
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )
        self._log = get_logger("upstream")

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def timeout_for(self, endpoint: Endpoint) -> float:
        """Timeout in seconds for an endpoint's timeout class."""
        if endpoint.timeout == TimeoutClass.LONG:
            return self.config.required_timeout_ms / 1000
        return self.config.optional_timeout_ms / 1000

    async def call(
        self,
        endpoint: Endpoint,
        user_id: int | None = None,
        body: dict[str, Any] | None = None,
    ) -> UpstreamResult:
        """
        Perform one request and classify the outcome.

        Args:
            endpoint: Endpoint descriptor
            user_id: Value for the ``{user_id}`` placeholders
            body: JSON body overriding the endpoint's body template

        Returns:
            UpstreamResult with the parsed JSON payload or failure details
        """
        url, rendered_body = endpoint.render(user_id)
        if body is not None:
            rendered_body = body

        result = await self._send(endpoint, url, rendered_body)
        if not result.ok:
            result.retry_after_seconds = self.config.retry_after_seconds
            self._log.warning(
                "upstream_call_failed",
                endpoint=endpoint.name,
                failure=result.failure.value,
                status_code=result.status_code,
                error=result.error,
            )
        return result

    async def _send(self, endpoint: Endpoint, url: str, body: dict[str, Any] | None) -> UpstreamResult:
        try:
            response = await self._client.request(
                endpoint.method,
                url,
                json=body,
                timeout=self.timeout_for(endpoint),
            )
        except httpx.TimeoutException as e:
            return UpstreamResult.failed(endpoint.name, FailureKind.TIMEOUT, f"Timed out: {e}")
        except httpx.HTTPError as e:
            return UpstreamResult.failed(endpoint.name, FailureKind.NETWORK, f"Network error: {e}")

        if not response.is_success:
            return UpstreamResult.failed(
                endpoint.name,
                FailureKind.HTTP_STATUS,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                detail=_error_body(response),
            )

        try:
            payload = response.json()
        except ValueError as e:
            return UpstreamResult.failed(
                endpoint.name,
                FailureKind.INVALID_PAYLOAD,
                f"Invalid JSON: {e}",
                status_code=response.status_code,
            )

        return UpstreamResult.success(endpoint.name, payload, response.status_code)


def _error_body(response: httpx.Response) -> Any:
    """Upstream error payload, parsed when it is JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text or None
