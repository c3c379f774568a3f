from __future__ import annotations

from datetime import UTC, datetime

import pytest

from nodecache.domain.filtering import (
    check_filter,
    filter_by_args,
    filter_by_identity,
    parse_timestamp,
)

ENTITIES: dict[str, dict[str, object]] = {
    "a": {"nodeId": "a", "title": "Run", "createdAt": "2024-01-01"},
    "b": {"nodeId": "b", "title": "Swim", "createdAt": "2024-06-01"},
    "c": {"nodeId": "c", "title": "Run", "createdAt": None},
}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-03-01", datetime(2024, 3, 1, tzinfo=UTC)),
        ("2024-03-01T12:00:00Z", datetime(2024, 3, 1, 12, tzinfo=UTC)),
        ("2024-03-01T14:00:00+02:00", datetime(2024, 3, 1, 12, tzinfo=UTC)),
        (1_709_294_400_000, datetime(2024, 3, 1, 12, tzinfo=UTC)),
        ("yesterday", None),
        (True, None),
        (None, None),
    ],
)
def test_parse_timestamp(raw: object, expected: datetime | None) -> None:
    assert parse_timestamp(raw) == expected


def test_less_than_or_equal_keeps_values_at_or_after_bound() -> None:
    operators = {"lessThanOrEqualTo": "2024-03-01"}

    assert check_filter(operators, "2024-06-01") is True
    assert check_filter(operators, "2024-03-01") is True
    assert check_filter(operators, "2024-01-01") is False


def test_greater_than_or_equal_keeps_values_at_or_before_bound() -> None:
    operators = {"greaterThanOrEqualTo": "2024-03-01"}

    assert check_filter(operators, "2024-01-01") is True
    assert check_filter(operators, "2024-06-01") is False


def test_unknown_operators_are_ignored_and_bad_dates_fail() -> None:
    assert check_filter({"equalTo": "2024-01-01"}, "whatever") is True
    assert check_filter({"lessThanOrEqualTo": "2024-01-01"}, "not a date") is False


def test_filter_by_identity_follows_relation_order() -> None:
    selected = filter_by_identity(ENTITIES, ["b", "missing", "a", "b"])

    assert list(selected) == ["b", "a"]


def test_filter_argument_example() -> None:
    selected = filter_by_args(
        ENTITIES,
        {"filter": {"createdAt": {"lessThanOrEqualTo": "2024-03-01"}}},
    )

    # entities without a value for the filtered field are not excluded
    assert list(selected) == ["b", "c"]


def test_condition_and_filter_combine() -> None:
    selected = filter_by_args(
        ENTITIES,
        {
            "condition": {"title": "Run"},
            "filter": {"createdAt": {"greaterThanOrEqualTo": "2024-03-01"}},
        },
    )

    assert list(selected) == ["a", "c"]


def test_condition_requires_exact_match() -> None:
    assert list(filter_by_args(ENTITIES, {"condition": {"title": "Swim"}})) == ["b"]
    assert filter_by_args(ENTITIES, {"condition": {"missing": 1}}) == {}


def test_unrelated_arguments_do_not_filter() -> None:
    assert filter_by_args(ENTITIES, {"first": 10}) == ENTITIES
