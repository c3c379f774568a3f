from __future__ import annotations

import pytest

from nodecache.domain import CacheMiss, NormalizedCache, UnknownFieldError
from tests.helpers.responses import (
    activities,
    activity,
    comment,
    comment_edges,
    comments,
    prerequisite,
    prerequisites,
    user,
)

ROUND_TRIP_QUERY = """
{
  activityById {
    __typename
    nodeId
    title
    userByOwnerId { __typename nodeId name }
    commentsByActivityId {
      __typename
      nodes { __typename nodeId body }
    }
  }
}
"""


def test_round_trip_returns_ingested_tree(cache: NormalizedCache) -> None:
    response = {
        "activityById": activity(
            "A1",
            userByOwnerId=user("U1"),
            commentsByActivityId=comments(comment("C1"), comment("C2", "yo")),
        )
    }
    cache.ingest(response)

    assert cache.read(ROUND_TRIP_QUERY) == response


def test_root_connection_lists_every_entity_of_the_type(cache: NormalizedCache) -> None:
    cache.ingest({"allActivities": activities(activity("A1"), activity("A2"))})
    cache.ingest({"activityById": activity("A3")})

    data = cache.read("{ allActivities { totalCount nodes { nodeId } } }")

    assert data == {
        "allActivities": {
            "totalCount": 3,
            "nodes": [{"nodeId": "A1"}, {"nodeId": "A2"}, {"nodeId": "A3"}],
        }
    }


def test_connection_filter_keeps_later_entity(cache: NormalizedCache) -> None:
    cache.ingest(
        {
            "allActivities": activities(
                activity("a", createdAt="2024-01-01"),
                activity("b", createdAt="2024-06-01"),
            )
        }
    )

    data = cache.read(
        '{ allActivities(filter: {createdAt: {lessThanOrEqualTo: "2024-03-01"}}) '
        "{ nodes { nodeId } } }"
    )

    assert data == {"allActivities": {"nodes": [{"nodeId": "b"}]}}


def test_connection_arguments_from_variables(cache: NormalizedCache) -> None:
    cache.ingest({"allActivities": activities(activity("A1"), activity("A2", "Swim"))})

    data = cache.read(
        "query Pick($condition: ActivityCondition) "
        "{ allActivities(condition: $condition) { nodes { nodeId title } } }",
        {"condition": {"title": "Swim"}},
    )

    assert data == {"allActivities": {"nodes": [{"nodeId": "A2", "title": "Swim"}]}}


def test_nested_connection_is_limited_to_related_entities(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1", commentsByActivityId=comments(comment("C1")))})
    cache.ingest({"allComments": comments(comment("C1"), comment("C9", "other"))})

    data = cache.read("{ activityById { commentsByActivityId { totalCount nodes { body } } } }")

    assert data == {
        "activityById": {"commentsByActivityId": {"totalCount": 1, "nodes": [{"body": "hi"}]}}
    }


def test_edges_selection(cache: NormalizedCache) -> None:
    connection = comment_edges(comment("C1"))
    cache.ingest({"activityById": activity("A1", commentsByActivityId=connection)})

    data = cache.read("{ activityById { commentsByActivityId { edges { node { nodeId } } } } }")

    expected = [{"node": {"nodeId": "C1"}}]
    assert data == {"activityById": {"commentsByActivityId": {"edges": expected}}}


def test_conflicting_relations_resolve_by_field_name(cache: NormalizedCache) -> None:
    cache.ingest(
        {
            "activityById": activity(
                "A1",
                activityPrerequisitesByActivity=prerequisites(
                    prerequisite("P1", activityByPrerequisite=activity("A2", "Warmup")),
                ),
            )
        }
    )

    forward = cache.read(
        "{ activityById { activityPrerequisitesByActivity "
        "{ nodes { activityByPrerequisite { title } } } } }"
    )
    backward = cache.read(
        '{ activityById(nodeId: "A2") { activityPrerequisitesByPrerequisite '
        "{ nodes { nodeId } } } }"
    )

    assert forward == {
        "activityById": {
            "activityPrerequisitesByActivity": {
                "nodes": [{"activityByPrerequisite": {"title": "Warmup"}}]
            }
        }
    }
    assert backward == {
        "activityById": {"activityPrerequisitesByPrerequisite": {"nodes": [{"nodeId": "P1"}]}}
    }


def test_back_reference_resolves_to_owner(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1", commentsByActivityId=comments(comment("C1")))})

    data = cache.read("{ allComments { nodes { nodeId activity { title } } } }")

    assert data == {"allComments": {"nodes": [{"nodeId": "C1", "activity": {"title": "Run"}}]}}


def test_aliases_and_fragments(cache: NormalizedCache) -> None:
    cache.ingest({"allActivities": activities(activity("A1"), activity("A2", "Swim"))})

    data = cache.read(
        """
        query {
          first: activityById(nodeId: "A1") { ...Names }
          second: activityById(nodeId: "A2") { ... on Activity { title } }
        }
        fragment Names on Activity { nodeId title }
        """
    )

    assert data == {
        "first": {"nodeId": "A1", "title": "Run"},
        "second": {"title": "Swim"},
    }


def test_missing_relation_resolves_to_none(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1")})

    assert cache.read("{ activityById { userByOwnerId { name } } }") == {
        "activityById": {"userByOwnerId": None}
    }


def test_root_typename(cache: NormalizedCache) -> None:
    assert cache.read("{ __typename }") == {"__typename": "Query"}


def test_missing_leaf_raises_cache_miss(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1")})

    with pytest.raises(CacheMiss) as excinfo:
        cache.read("{ activityById { description } }")

    assert excinfo.value.field_name == "description"
    assert excinfo.value.type_name == "Activity"


def test_never_ingested_root_fields_raise_cache_miss(cache: NormalizedCache) -> None:
    with pytest.raises(CacheMiss):
        cache.read("{ allComments { nodes { nodeId } } }")
    with pytest.raises(CacheMiss):
        cache.read("{ activityById { nodeId } }")
    with pytest.raises(CacheMiss):
        cache.read('{ activityById(nodeId: "A404") { nodeId } }')


def test_unknown_field_raises(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1")})

    with pytest.raises(UnknownFieldError):
        cache.read("{ activityById { sponsor { name } } }")


def test_load_query_reports_errors_instead_of_raising(cache: NormalizedCache) -> None:
    cache.ingest({"activityById": activity("A1")})

    ok = cache.load_query("{ activityById { title } }")
    missing = cache.load_query("{ activityById { description } }")
    syntax = cache.load_query("{ activityById { ")

    assert ok.ok
    assert ok.data == {"activityById": {"title": "Run"}}
    assert not missing.ok
    assert missing.data is None
    assert missing.error is not None
    assert "description" in missing.error
    assert not syntax.ok


def test_clear_turns_previous_reads_into_cache_misses(cache: NormalizedCache) -> None:
    cache.ingest({"allActivities": activities(activity("A1"))})
    cache.ingest({"activityById": activity("A1")})
    assert cache.read("{ activityById { title } }") == {"activityById": {"title": "Run"}}

    cache.clear()

    assert len(cache.store) == 0
    with pytest.raises(CacheMiss):
        cache.read("{ activityById { title } }")
    with pytest.raises(CacheMiss):
        cache.read("{ allActivities { nodes { title } } }")


def test_aliased_root_field_reads_alias_from_store(cache: NormalizedCache) -> None:
    cache.ingest({"first": activity("A1"), "activityById": activity("A2", "Swim")})

    data = cache.read("{ first: activityById(rowId: 1) { title } activityById { title } }")

    assert data == {"first": {"title": "Run"}, "activityById": {"title": "Swim"}}


def test_read_rooted_at_alias_map(cache: NormalizedCache) -> None:
    first = cache.ingest({"activityById": activity("A1")})
    cache.ingest({"activityById": activity("A2", "Swim")})

    pinned = cache.read("{ activityById { title } }", root_aliases=first)
    latest = cache.read("{ activityById { title } }")

    assert first == {"activityById": "A1"}
    assert pinned == {"activityById": {"title": "Run"}}
    assert latest == {"activityById": {"title": "Swim"}}


def test_alias_map_root_still_misses_after_clear(cache: NormalizedCache) -> None:
    aliases = cache.ingest({"activityById": activity("A1")})
    cache.clear()

    with pytest.raises(CacheMiss):
        cache.read("{ activityById { title } }", root_aliases=aliases)
    with pytest.raises(CacheMiss):
        cache.read("{ other: activityById { title } }", root_aliases=aliases)


def test_both_conflicting_relations_on_one_entity_are_kept(cache: NormalizedCache) -> None:
    cache.ingest(
        {
            "activityPrerequisiteByNodeId": prerequisite(
                "P1",
                activityByActivity=activity("A1"),
                activityByPrerequisite=activity("A2", "Warmup"),
            )
        }
    )

    link = cache.store.get("ActivityPrerequisite", "P1")
    assert link is not None
    assert link["activityByActivity"] == "A1"
    assert link["activityByPrerequisite"] == "A2"
    assert "Activity" not in link

    data = cache.read(
        "{ activityPrerequisiteByNodeId { nodeId "
        "activityByActivity { title } activityByPrerequisite { title } } }"
    )
    owner = cache.read(
        '{ activityById(nodeId: "A1") { activityPrerequisitesByActivity { nodes { nodeId } } } }'
    )

    assert data == {
        "activityPrerequisiteByNodeId": {
            "nodeId": "P1",
            "activityByActivity": {"title": "Run"},
            "activityByPrerequisite": {"title": "Warmup"},
        }
    }
    assert owner == {
        "activityById": {"activityPrerequisitesByActivity": {"nodes": [{"nodeId": "P1"}]}}
    }
