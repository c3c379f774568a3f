"""Network-once request coordination.

At most one network operation is in flight per ``(query, variables)``
signature. Callers arriving while it runs share its outcome; callers arriving
after it succeeded are answered from the normalized cache.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from .requests import RequestRegistry, RequestState, RequestStatus

if TYPE_CHECKING:
    from .cache import NormalizedCache
    from .ports.transport import GraphQLTransport

log = getLogger(__name__)

type CacheReadFn = Callable[[str, Mapping[str, object] | None], dict[str, object]]


def _describe(query: str) -> str:
    collapsed = " ".join(query.split())
    return collapsed if len(collapsed) <= 60 else f"{collapsed[:57]}..."


@dataclass(slots=True)
class RequestCoordinator:
    cache: NormalizedCache
    transport: GraphQLTransport
    registry: RequestRegistry = field(default_factory=RequestRegistry)
    name: ClassVar[str] = "network-once"

    async def execute(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
        *,
        cache_read: CacheReadFn | None = None,
        persist: bool = True,
    ) -> dict[str, object]:
        """Return the ``data`` of ``query``, fetching it at most once."""

        state = self.registry.get(query, variables)
        match state.status:
            case RequestStatus.PENDING:
                if state.future is None:
                    raise RuntimeError("Pending request has no in-flight future")
                log.debug("Joining in-flight request: %s", _describe(query))
                return await asyncio.shield(state.future)
            case RequestStatus.SUCCEEDED:
                return self._read_from_cache(state, query, variables, cache_read)
            case RequestStatus.IDLE | RequestStatus.FAILED:
                task = asyncio.ensure_future(self._fetch(state, query, variables, persist=persist))
                state.start(task)
                log.debug("Fetching from network: %s", _describe(query))
                return await asyncio.shield(task)

    def run(
        self,
        query: str,
        variables: Mapping[str, object] | None = None,
        *,
        cache_read: CacheReadFn | None = None,
        persist: bool = True,
    ) -> dict[str, object]:
        return asyncio.run(
            self.execute(query, variables, cache_read=cache_read, persist=persist)
        )

    def clear(self) -> None:
        """Forget every request outcome and empty the cache."""

        self.registry.clear()
        self.cache.clear()

    async def _fetch(
        self,
        state: RequestState,
        query: str,
        variables: Mapping[str, object] | None,
        *,
        persist: bool,
    ) -> dict[str, object]:
        try:
            response = await self.transport.post(query, variables)
            if response.errors:
                log.warning(
                    "Response carried %d error(s) alongside data: %s",
                    len(response.errors),
                    "; ".join(response.errors),
                )
            data = response.data or {}
            root_aliases = self.cache.write(data, persist=persist)
        except BaseException as exc:
            state.fail(exc)
            log.warning("Request failed (%s): %s", type(exc).__name__, _describe(query))
            raise
        state.succeed(root_aliases)
        return data

    def _read_from_cache(
        self,
        state: RequestState,
        query: str,
        variables: Mapping[str, object] | None,
        cache_read: CacheReadFn | None,
    ) -> dict[str, object]:
        if state.result is None:
            try:
                if cache_read is not None:
                    state.result = cache_read(query, variables)
                else:
                    state.result = self.cache.read(
                        query,
                        variables,
                        root_aliases=state.root_aliases,
                    )
            except Exception:
                state.reset()
                raise
            log.debug("Answered from cache: %s", _describe(query))
        return state.result
