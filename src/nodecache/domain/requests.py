"""Request state machine keyed by query signature."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    from .types import RelationValue

type RequestSignature = tuple[str, str]


class RequestStatus(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def request_signature(
    query: str,
    variables: Mapping[str, object] | None = None,
) -> RequestSignature:
    """Identify a request by its query text and canonically encoded variables."""

    encoded = json.dumps(variables or {}, sort_keys=True, separators=(",", ":"), default=str)
    return (query, encoded)


@dataclass(slots=True)
class RequestState:
    """Lifecycle of one signature: ``idle -> pending -> succeeded | failed``."""

    signature: RequestSignature
    status: RequestStatus = RequestStatus.IDLE
    future: asyncio.Future[dict[str, object]] | None = None
    result: dict[str, object] | None = None
    root_aliases: dict[str, RelationValue] | None = None
    last_error: BaseException | None = None
    fetches: int = 0

    def start(self, future: asyncio.Future[dict[str, object]]) -> None:
        if self.status is RequestStatus.PENDING:
            raise RuntimeError("A request for this signature is already in flight")
        self.status = RequestStatus.PENDING
        self.future = future
        self.result = None
        self.root_aliases = None
        self.last_error = None
        self.fetches += 1

    def succeed(self, root_aliases: dict[str, RelationValue] | None = None) -> None:
        self.status = RequestStatus.SUCCEEDED
        self.future = None
        self.root_aliases = root_aliases

    def fail(self, error: BaseException) -> None:
        self.status = RequestStatus.FAILED
        self.future = None
        self.last_error = error

    def reset(self) -> None:
        self.status = RequestStatus.IDLE
        self.future = None
        self.result = None
        self.root_aliases = None


@dataclass(slots=True)
class RequestRegistry:
    _states: dict[RequestSignature, RequestState] = field(
        default_factory=dict[RequestSignature, RequestState]
    )

    def get(self, query: str, variables: Mapping[str, object] | None = None) -> RequestState:
        """Return the state for a signature, creating it on first use."""

        signature = request_signature(query, variables)
        state = self._states.get(signature)
        if state is None:
            state = RequestState(signature=signature)
            self._states[signature] = state
        return state

    def clear(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)
