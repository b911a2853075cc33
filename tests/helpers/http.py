from __future__ import annotations

import json
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl

import httpx

from civisync.adapters.http_resilience import ResilienceConfig, ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable


def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    requests: list[httpx.Request] | None = None,
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            transport=httpx.MockTransport(async_handler),
            base_url=resilience.base_url or "",
        )
        return client

    return factory


def request_fields(request: httpx.Request) -> dict[str, str]:
    """Query parameters of a GET, or the form body of a POST."""

    if request.method == "GET":
        return dict(request.url.params)
    return dict(parse_qsl(request.content.decode()))


def civicrm_params(request: httpx.Request) -> dict[str, object]:
    return json.loads(request_fields(request)["json"])


def resilience_config(name: str = "test") -> ResilienceConfig:
    return ResilienceConfig(name=name)
