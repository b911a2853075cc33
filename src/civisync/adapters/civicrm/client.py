"""Async client for the CiviCRM APIv3 REST endpoint."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError as PydanticValidationError

from civisync.adapters.http_resilience import ResilientClient
from civisync.domain.errors import ApiError

from .schema import ApiEnvelope

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from civisync.config.civicrm import CiviCrmConfig
    from civisync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

READ_ACTIONS: Final[frozenset[str]] = frozenset(
    {"get", "getsingle", "getvalue", "getcount", "duplicatecheck"}
)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class CiviCrmClient:
    """Issue APIv3 calls; reads go out as GET, everything else as POST.

    Remote failures (transport errors, HTTP errors and ``is_error`` envelopes) are
    raised as :class:`~civisync.domain.errors.ApiError`.
    """

    config: CiviCrmConfig
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

    async def call(self, entity: str, action: str, params: Mapping[str, object]) -> ApiEnvelope:
        request_params = {
            "entity": entity,
            "action": action,
            "json": json.dumps(dict(params), default=str),
            "api_key": self.config.api_key,
            "key": self.config.site_key,
        }
        log.debug("CiviCRM %s.%s", entity, action)

        try:
            if action in READ_ACTIONS:
                response = await self.http.get(self.config.rest_url, params=request_params)
            else:
                response = await self.http.post(self.config.rest_url, data=request_params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ApiError(
                f"CiviCRM request failed: {exc}",
                entity=entity,
                action=action,
                params=params,
            ) from exc
        except ValueError as exc:
            raise ApiError(
                "CiviCRM returned a non-JSON response",
                entity=entity,
                action=action,
                params=params,
            ) from exc

        if not isinstance(payload, dict):
            raise ApiError(
                "Unexpected CiviCRM response payload",
                entity=entity,
                action=action,
                params=params,
            )

        try:
            envelope = ApiEnvelope.model_validate(payload)
        except PydanticValidationError as exc:
            raise ApiError(
                "Unexpected CiviCRM response payload",
                entity=entity,
                action=action,
                params=params,
                result=payload,
            ) from exc

        if envelope.is_error:
            raise ApiError(
                envelope.error_message or f"{entity}.{action} failed",
                entity=entity,
                action=action,
                params=params,
                result=payload,
                code=envelope.error_code,
            )
        return envelope
