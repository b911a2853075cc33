"""HTTP client for the WooCommerce REST v3 API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from civisync.adapters.http_resilience import ResilientClient
from civisync.domain.errors import SyncError

from .schema import ErrorPayload, NotePayload, OrderPayload, ProductPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from civisync.config.http_resilience import ResilienceConfig
    from civisync.config.woocommerce import WooCommerceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class WooCommerceAPIError(SyncError):
    """Raised when the WooCommerce API fails or returns an error payload."""

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


@dataclass(slots=True)
class WooCommerceClient:
    config: WooCommerceConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    @property
    def http(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_order(self, order_id: int) -> OrderPayload:
        payload = await self._request("GET", f"orders/{order_id}")
        return self._validate(OrderPayload, payload)

    async def fetch_product(self, product_id: int) -> ProductPayload | None:
        payload = await self._request("GET", f"products/{product_id}", missing_ok=True)
        if payload is None:
            return None
        return self._validate(ProductPayload, payload)

    async def fetch_variation(self, product_id: int, variation_id: int) -> ProductPayload | None:
        payload = await self._request(
            "GET", f"products/{product_id}/variations/{variation_id}", missing_ok=True
        )
        if payload is None:
            return None
        return self._validate(ProductPayload, payload)

    async def create_order_note(self, order_id: int, note: str) -> NotePayload:
        payload = await self._request("POST", f"orders/{order_id}/notes", json={"note": note})
        return self._validate(NotePayload, payload)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, object] | None = None,
        missing_ok: bool = False,
    ) -> dict[str, object] | None:
        try:
            response = await self.http.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise WooCommerceAPIError(f"WooCommerce request failed: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND and missing_ok:
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            raise WooCommerceAPIError(
                "WooCommerce returned a non-JSON response", status=response.status_code
            ) from exc

        if response.is_error:
            if isinstance(payload, dict) and "code" in payload:
                error = ErrorPayload.model_validate(payload)
                log.error("WooCommerce API error %s: %s", error.code, error.message)
                raise WooCommerceAPIError(
                    error.message or error.code, code=error.code, status=response.status_code
                )
            raise WooCommerceAPIError(
                f"WooCommerce {method} {path} failed", status=response.status_code
            )

        if not isinstance(payload, dict):
            raise WooCommerceAPIError("Unexpected WooCommerce response payload")
        return payload

    @staticmethod
    def _validate[TModel: (OrderPayload, ProductPayload, NotePayload)](
        model: type[TModel], payload: dict[str, object] | None
    ) -> TModel:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise WooCommerceAPIError("Unexpected WooCommerce response payload") from exc
