"""Filters applied to the entities of a resolved connection."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .types import Entity, EntityId

log = getLogger(__name__)

CONDITION_ARG = "condition"
FILTER_ARG = "filter"


def parse_timestamp(value: object) -> datetime | None:
    """Interpret ISO-8601 strings and epoch milliseconds; ``None`` when unparseable."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


# The comparison polarity is inverted relative to the operator names:
# ``lessThanOrEqualTo`` keeps values at or after the bound. Callers rely on it.
_COMPARATORS: dict[str, Callable[[datetime, datetime], bool]] = {
    "lessThanOrEqualTo": lambda value, bound: value >= bound,
    "greaterThanOrEqualTo": lambda value, bound: value <= bound,
}


def check_filter(operators: Mapping[str, object], value: object) -> bool:
    """Return whether ``value`` satisfies every recognised comparator in ``operators``."""

    for operator, bound in operators.items():
        comparator = _COMPARATORS.get(operator)
        if comparator is None:
            continue
        value_ts = parse_timestamp(value)
        bound_ts = parse_timestamp(bound)
        if value_ts is None or bound_ts is None:
            return False
        if not comparator(value_ts, bound_ts):
            return False
    return True


def filter_by_identity(
    entities: Mapping[EntityId, Entity],
    ids: Iterable[EntityId],
) -> dict[EntityId, Entity]:
    """Keep exactly the entities named by ``ids``, in the order of ``ids``."""

    selected: dict[EntityId, Entity] = {}
    for entity_id in ids:
        key = str(entity_id)
        entity = entities.get(key)
        if entity is not None and key not in selected:
            selected[key] = entity
    return selected


def _matches_condition(entity: Entity, condition: Mapping[str, object]) -> bool:
    return all(key in entity and entity[key] == expected for key, expected in condition.items())


def _matches_filter(entity: Entity, filters: Mapping[str, object]) -> bool:
    for key, operators in filters.items():
        value = entity.get(key)
        if not value:
            continue
        if not isinstance(operators, Mapping):
            log.debug("Ignoring non-object filter for field %r", key)
            continue
        if not check_filter(operators, value):
            return False
    return True


def filter_by_args(
    entities: Mapping[EntityId, Entity],
    args: Mapping[str, object],
) -> dict[EntityId, Entity]:
    """Apply the ``condition`` and ``filter`` query arguments."""

    selected = dict(entities)
    condition = args.get(CONDITION_ARG)
    if isinstance(condition, Mapping):
        selected = {
            entity_id: entity
            for entity_id, entity in selected.items()
            if _matches_condition(entity, condition)
        }
    filters = args.get(FILTER_ARG)
    if isinstance(filters, Mapping):
        selected = {
            entity_id: entity
            for entity_id, entity in selected.items()
            if _matches_filter(entity, filters)
        }
    return selected
