from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from nodecache.adapters.execution import DocumentExecutor
from nodecache.adapters.notifications import TypeChangeEmitter
from nodecache.adapters.type_map import StaticTypeMap
from nodecache.config.normalization import NormalizationConfig
from nodecache.domain import NormalizedCache, RelationConflictTable

if TYPE_CHECKING:
    from collections.abc import Iterator

ACTIVITY_FIELD_TYPES: dict[str, str] = {
    "allActivities": "ActivitiesConnection",
    "activityById": "Activity",
    "activityByActivity": "Activity",
    "activityByPrerequisite": "Activity",
    "activityPrerequisiteByNodeId": "ActivityPrerequisite",
    "activitiesByOwnerId": "ActivitiesConnection",
    "userByOwnerId": "User",
    "allUsers": "UsersConnection",
    "activityPrerequisitesByActivity": "ActivityPrerequisitesConnection",
    "activityPrerequisitesByPrerequisite": "ActivityPrerequisitesConnection",
    "commentsByActivityId": "CommentsConnection",
    "allComments": "CommentsConnection",
    "createActivity": "CreateActivityPayload",
    "activity": "Activity",
}

ACTIVITY_CONFLICTS: tuple[tuple[str, str], ...] = (
    ("activityPrerequisitesByActivity", "activityByActivity"),
    ("activityPrerequisitesByPrerequisite", "activityByPrerequisite"),
)


@pytest.fixture
def type_map() -> StaticTypeMap:
    return StaticTypeMap(field_types=dict(ACTIVITY_FIELD_TYPES))


@pytest.fixture
def conflicts() -> RelationConflictTable:
    return RelationConflictTable.from_pairs(ACTIVITY_CONFLICTS)


@pytest.fixture
def emitter() -> TypeChangeEmitter:
    return TypeChangeEmitter()


@pytest.fixture
def notifications(emitter: TypeChangeEmitter) -> list[str]:
    seen: list[str] = []
    emitter.subscribe(seen.append)
    return seen


@pytest.fixture
def cache(
    type_map: StaticTypeMap,
    conflicts: RelationConflictTable,
    emitter: TypeChangeEmitter,
) -> NormalizedCache:
    return NormalizedCache(
        type_resolver=type_map,
        executor=DocumentExecutor(),
        conflicts=conflicts,
        config=NormalizationConfig(relation_conflicts=ACTIVITY_CONFLICTS),
        notifier=emitter,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    for name in (
        "GRAPHQL_ENDPOINT",
        "GRAPHQL_AUTH_TOKEN",
        "GRAPHQL_HTTP_METHOD",
        "GRAPHQL_RATE_LIMIT",
        "GRAPHQL_HTTP_CACHE",
        "NODECACHE_DATA_DIR",
        "NODECACHE_ID_FIELD",
        "NODECACHE_RELATION_CONFLICTS",
        "DATABASE_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
