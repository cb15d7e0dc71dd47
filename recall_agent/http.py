"""
HTTP transport for the Recall competition API with retries and error classification.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from .errors import (
    ConfigurationError,
    HttpStatusError,
    NetworkError,
    RecallError,
    ValidationError,
)
from .models import RecallConfig
from .validation import parse_json
from .utils import redact_secrets


class RecallHttpClient:
    """
    Authenticated async HTTP client for the competition API.

    Retries network failures, 429 and 5xx responses with capped exponential
    backoff. Any other non-2xx status is surfaced immediately.
    """

    def __init__(
        self,
        config: RecallConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if not config.api_key:
            raise ConfigurationError("Recall API key is not configured (set RECALL_API_KEY)")

        self.config = config
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport
        )
        # Attempts used by the most recent request
        self.last_attempts = 0

        logger.debug(
            f"Recall HTTP client initialized: {config.base_url} "
            f"{redact_secrets(dict(self.client.headers))}"
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """
        Delay before the retry that follows ``attempt`` (0-based).

        Args:
            attempt: index of the attempt that just failed
            retry_after: server supplied Retry-After seconds, if any

        Returns:
            Seconds to sleep, never more than ``backoff_max_seconds``
        """
        if retry_after is not None:
            delay = retry_after
        else:
            delay = self.config.backoff_base_seconds * (2 ** attempt)
        return max(0.0, min(delay, self.config.backoff_max_seconds))

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: path relative to the base URL, e.g. ``/agent/portfolio``
            params: query parameters; ``None`` values are dropped
            json: JSON body

        Returns:
            Decoded JSON body (``None`` for an empty body)

        Raises:
            NetworkError: connection failures/timeouts after all retries
            HttpStatusError: non-2xx status
            ValidationError: 2xx body that is not JSON or cannot be decoded
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        total_attempts = self.config.max_retries + 1
        last_error: Optional[RecallError] = None
        last_cause: Optional[BaseException] = None

        for attempt in range(total_attempts):
            self.last_attempts = attempt + 1
            retry_after = None
            try:
                logger.debug(f"{method} {path} (attempt {attempt + 1}/{total_attempts})")
                response = await self.client.request(
                    method, path, params=query or None, json=json
                )
            except httpx.DecodingError as e:
                logger.error(f"{method} {path} returned an undecodable body: {e}")
                raise ValidationError.single(
                    "$", f"response body could not be decoded: {e}", kind="decoding_error"
                ) from e
            except httpx.TransportError as e:
                last_error = NetworkError(
                    f"{method} {path}: {type(e).__name__}: {e}", attempts=attempt + 1
                )
                last_cause = e
            except (httpx.RequestError, httpx.InvalidURL) as e:
                # Redirect loops, bad URLs: retrying cannot help
                logger.error(f"{method} {path} failed: {type(e).__name__}: {e}")
                raise NetworkError(
                    f"{method} {path}: {type(e).__name__}: {e}", attempts=attempt + 1
                ) from e
            else:
                if response.is_success:
                    return parse_json(response)

                error = self._status_error(response, attempt + 1)
                if not error.retryable:
                    logger.error(f"{method} {path} failed: {error}")
                    raise error
                last_error = error
                last_cause = None
                retry_after = self._retry_after(response)

            if attempt < total_attempts - 1:
                delay = self.backoff_delay(attempt, retry_after)
                logger.warning(f"{method} {path} failed ({last_error}), retrying in {delay:.2f}s")
                await asyncio.sleep(delay)

        logger.error(f"{method} {path} failed after {total_attempts} attempts: {last_error}")
        raise last_error from last_cause

    @staticmethod
    def _status_error(response: httpx.Response, attempts: int) -> HttpStatusError:
        try:
            body = response.json()
        except ValueError:
            body = response.text

        message = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
        elif body:
            message = str(body)[:500]

        return HttpStatusError(
            response.status_code,
            body=body,
            message=str(message) if message else response.reason_phrase,
            attempts=attempts
        )

    @staticmethod
    def _retry_after(response: httpx.Response) -> Optional[float]:
        if response.status_code != 429:
            return None
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None
