"""Rate limited httpx client with read retries and an optional in-memory read cache."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from civisync.config.http_resilience import ResilienceConfig

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from civisync.config.http_resilience import CachePredicate, RetryPolicy

__all__ = ["ResilienceConfig", "ResilientClient", "build_retry", "build_transport"]

log = getLogger(__name__)

IDEMPOTENT_METHODS: Final[tuple[str, ...]] = ("GET", "HEAD", "OPTIONS")


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.attempts,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=IDEMPOTENT_METHODS,
        status_forcelist=tuple(policy.status_forcelist),
    )


def build_transport(policy: RetryPolicy) -> httpx.AsyncBaseTransport:
    """Plain transport when retries are off, otherwise one retrying idempotent reads."""

    if policy.attempts <= 0:
        return httpx.AsyncHTTPTransport()
    return RetryTransport(retry=build_retry(policy))


class _JsonBodyFilter(BaseFilter[HishelCacheResponse]):
    """Store a response only when its JSON body satisfies the predicate."""

    def __init__(self, predicate: CachePredicate) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body)
        except ValueError:
            return False
        return bool(self._predicate(payload))


def _open_client(config: ResilienceConfig) -> httpx.AsyncClient:
    cache = config.cache
    base_url = config.base_url or ""
    headers = dict(config.default_headers or {})
    transport = build_transport(config.retry)
    if cache is None:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=config.timeout_seconds,
            headers=headers,
            auth=config.auth,
            transport=transport,
        )

    storage = AsyncSqliteStorage(database_path=":memory:", default_ttl=cache.ttl_seconds)
    policy = FilterPolicy(response_filters=[_JsonBodyFilter(cache.cacheable)])
    return AsyncCacheClient(
        base_url=base_url,
        timeout=config.timeout_seconds,
        headers=headers,
        auth=config.auth,
        transport=transport,
        storage=storage,
        policy=policy,
    )


class ResilientClient:
    """The httpx client behind both the shop and the CRM adapters.

    Every request waits on the rate limiter when one is configured.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = None
        if config.ratelimit is not None:
            self._limiter = AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
        self._client = _open_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        log.debug("%s: %s %s", self.config.name, method, url)
        if self._limiter is None:
            return await self._client.request(method, url, params=params, data=data, json=json)
        async with self._limiter:
            return await self._client.request(method, url, params=params, data=data, json=json)

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def post(
        self, url: str, *, data: Mapping[str, str] | None = None, json: object = None
    ) -> httpx.Response:
        return await self.request("POST", url, data=data, json=json)
