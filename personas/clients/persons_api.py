"""Async HTTP client for the persons REST resource."""

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from personas.config import ApiConfig
from personas.models.errors import DecodeError, TransportError
from personas.models.person import PersonRecord, from_api, to_api
from personas.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class PersonsApiClient:
    """Low-level client for the single persons endpoint.

    GET lists records, POST creates, PUT updates and DELETE removes, all on
    the same URL. Errors surface as ``TransportError`` or ``DecodeError``.
    """

    def __init__(self, config: ApiConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize the client.

        Args:
            config: Endpoint configuration (defaults to environment values)
            transport: Optional httpx transport, used by tests to fake the API
        """
        self.config = config or ApiConfig()
        self.client = httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "PersonsApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def load(self) -> list[PersonRecord]:
        """Fetch every record.

        Items that are neither citizens nor foreigners are dropped.
        """
        response = await self._request_with_retries(lambda: self._send("GET"))
        data = self._decode_json(response)
        if not isinstance(data, list):
            raise DecodeError(f"Expected a JSON array of persons, got {type(data).__name__}")

        records = [record for record in (from_api(item) for item in data) if record is not None]
        if len(records) < len(data):
            logger.info(f"Dropped {len(data) - len(records)} of {len(data)} items that are not person records")
        return records

    async def create(self, record: PersonRecord) -> PersonRecord:
        """Create a record and return it with the server-assigned id."""
        response = await self._send("POST", to_api(record, include_id=False))
        data = self._decode_json(response)

        if not isinstance(data, dict) or data.get("id") is None:
            raise DecodeError("Create response does not contain an id")
        return record.model_copy(update={"id": self._parse_id(data["id"])})

    async def update(self, record: PersonRecord) -> str:
        """Replace a record on the server.

        Returns:
            The plain-text confirmation sent by the server
        """
        if record.id is None:
            raise ValueError("Cannot update a person without an id")
        response = await self._send("PUT", to_api(record))
        return response.text

    async def delete(self, person_id: int) -> None:
        await self._send("DELETE", {"id": person_id})

    async def _send(self, method: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        """Send one request and map failures to ``TransportError``."""
        logger.debug(f"{method} {self.config.base_url} payload={payload}")
        try:
            response = await self.client.request(method, self.config.base_url, json=payload)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} request timed out after {self.config.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} request failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"{method} request returned status {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse_id(value: Any) -> int:
        """Server ids are positive integers, sent either as numbers or digit strings."""
        if isinstance(value, int) and not isinstance(value, bool):
            new_id = value
        elif isinstance(value, str) and value.isascii() and value.isdigit():
            new_id = int(value)
        else:
            raise DecodeError(f"Create response id is not an integer: {value!r}")
        if new_id <= 0:
            raise DecodeError(f"Create response id is not positive: {value!r}")
        return new_id

    def _decode_json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

    async def _request_with_retries(self, call: Callable[[], Awaitable[T]]) -> T:
        """Retry an idempotent request on network errors and 5xx responses."""
        for attempt in range(self.config.max_retries):
            try:
                return await call()
            except TransportError as e:
                retryable = e.status_code is None or e.status_code >= 500
                if retryable and attempt < self.config.max_retries - 1:
                    delay = self.config.retry_delay * (2**attempt)
                    logger.warning(f"{e}; retrying in {delay:.1f}s (attempt {attempt + 1})")
                    await asyncio.sleep(delay)
                    continue
                raise
