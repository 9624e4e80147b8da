from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError

from kraken_signer.builder import API_HOST, SignedRequest, build
from kraken_signer.errors import KrakenSignerError
from kraken_signer.nonce import NonceGenerator
from kraken_signer.types import Credential, NewOrder

logger = logging.getLogger("kraken_signer.exchange")

_DEFAULT_MAX_RETRIES = 3
_DEFAULT_RETRY_BASE_SECONDS = 0.5
_DEFAULT_RETRY_MAX_SECONDS = 8.0

ResultT = TypeVar("ResultT")


class KrakenApiError(KrakenSignerError):
    def __init__(self, *, status_code: int, payload: Any, retry_after: str | None = None):
        super().__init__(f"Kraken API error: status={status_code} payload={payload!r}")
        self.status_code = status_code
        self.payload = payload
        self.retry_after = retry_after


class ApiResponse(BaseModel, Generic[ResultT]):
    error: list[str] = Field(default_factory=list)
    result: ResultT | None = None


class AddOrderResult(BaseModel):
    descr: dict[str, str] = Field(default_factory=dict)
    txid: list[str] | None = None


class KrakenPrivateClient:
    def __init__(
        self,
        *,
        credential: Credential,
        base_url: str = API_HOST,
        timeout_seconds: float = 10.0,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        retry_base_seconds: float = _DEFAULT_RETRY_BASE_SECONDS,
        retry_max_seconds: float = _DEFAULT_RETRY_MAX_SECONDS,
        generator: NonceGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential = credential
        self._base_url = base_url.rstrip("/")
        self._generator = generator
        self._max_retries = int(max(0, max_retries))
        self._retry_base_seconds = float(max(0.0, retry_base_seconds))
        self._retry_max_seconds = float(max(self._retry_base_seconds, retry_max_seconds))
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def sign(self, method_name: str, params: Mapping[str, Any]) -> SignedRequest:
        return build(
            self._credential,
            method_name,
            params,
            generator=self._generator,
            host=self._base_url,
        )

    async def balance(self) -> dict[str, str]:
        data = await self._private("Balance", params={}, idempotent=True)
        return _unwrap(data, ApiResponse[dict[str, str]])

    async def add_order(self, order: NewOrder) -> AddOrderResult:
        data = await self._private("AddOrder", params=order.to_params(), idempotent=False)
        result = _unwrap(data, ApiResponse[AddOrderResult])
        logger.info(
            "order_accepted",
            extra={"pair": order.pair, "txid": result.txid, "method": "AddOrder"},
        )
        return result

    async def send(self, request: SignedRequest) -> Any:
        response = await self._client.request(
            request.method,
            request.url,
            content=request.body.encode("utf-8"),
            headers={
                **request.headers,
                "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
            },
        )
        if response.status_code >= 400:
            payload: Any
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise KrakenApiError(
                status_code=response.status_code,
                payload=payload,
                retry_after=response.headers.get("Retry-After"),
            )
        try:
            return response.json()
        except ValueError as exc:
            raise KrakenApiError(status_code=response.status_code, payload=response.text) from exc

    async def _private(
        self,
        method_name: str,
        *,
        params: Mapping[str, Any],
        idempotent: bool,
    ) -> Any:
        max_retries = self._max_retries if idempotent else 0
        attempt = 0
        while True:
            # Every attempt gets its own nonce and signature.
            request = self.sign(method_name, params)
            logger.debug(
                "private_request",
                extra={
                    "method": method_name,
                    "path": request.path,
                    "nonce": request.nonce,
                    "attempt": attempt,
                },
            )
            try:
                return await self.send(request)
            except (httpx.TimeoutException, httpx.TransportError):
                if attempt >= max_retries:
                    raise
                delay = self._retry_delay_seconds(attempt=attempt, retry_after=None)
            except KrakenApiError as exc:
                if not _should_retry_http_error(status_code=exc.status_code):
                    raise
                if attempt >= max_retries:
                    raise
                delay = self._retry_delay_seconds(attempt=attempt, retry_after=exc.retry_after)
                logger.warning(
                    "private_request_retry",
                    extra={
                        "method": method_name,
                        "status_code": exc.status_code,
                        "attempt": attempt,
                    },
                )
            await asyncio.sleep(delay)
            attempt += 1

    def _retry_delay_seconds(self, *, attempt: int, retry_after: str | None) -> float:
        if retry_after:
            try:
                value = float(retry_after)
                if value > 0:
                    return value
            except ValueError:
                pass
        delay = self._retry_base_seconds * (2**attempt)
        return float(min(delay, self._retry_max_seconds))


def _unwrap(data: Any, model: type[ApiResponse[ResultT]]) -> ResultT:
    try:
        envelope = model.model_validate(data)
    except ValidationError as exc:
        raise KrakenApiError(status_code=200, payload=data) from exc
    if envelope.error:
        raise KrakenApiError(status_code=200, payload=envelope.error)
    if envelope.result is None:
        raise KrakenApiError(status_code=200, payload=data)
    return envelope.result


def _should_retry_http_error(*, status_code: int) -> bool:
    return status_code == 429 or status_code >= 500
