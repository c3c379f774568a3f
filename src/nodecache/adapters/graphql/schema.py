"""Response envelope schemas for GraphQL over HTTP."""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

log = logging.getLogger(__name__)


class GraphQLBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "GraphQL %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class GraphQLErrorLocation(GraphQLBaseModel):
    line: int
    column: int


class GraphQLErrorPayload(GraphQLBaseModel):
    message: str
    locations: list[GraphQLErrorLocation] | None = None
    path: list[str | int] | None = None
    extensions: dict[str, Any] | None = None


class GraphQLResponse(GraphQLBaseModel):
    data: dict[str, Any] | None = None
    errors: list[GraphQLErrorPayload] | None = None
    extensions: dict[str, Any] | None = None

    def error_messages(self) -> tuple[str, ...]:
        if not self.errors:
            return ()
        return tuple(error.message for error in self.errors)
