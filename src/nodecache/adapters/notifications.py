"""In-process change notifications keyed by entity type."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from nodecache.domain.ports.notifications import ChangeNotifier

if TYPE_CHECKING:
    from collections.abc import Callable

type ChangeCallback = Callable[[str], None]

log = getLogger(__name__)


@dataclass(slots=True)
class TypeChangeEmitter:
    """Fan out ``notify(type_name)`` to subscribed callbacks.

    Callbacks subscribed with a ``type_name`` only hear about that type;
    callbacks subscribed without one hear about every type. A failing callback
    is logged and does not stop delivery to the others.
    """

    _by_type: defaultdict[str, list[ChangeCallback]] = field(
        default_factory=lambda: defaultdict(list)
    )
    _catch_all: list[ChangeCallback] = field(default_factory=list[ChangeCallback])

    def subscribe(
        self,
        callback: ChangeCallback,
        type_name: str | None = None,
    ) -> Callable[[], None]:
        """Register ``callback``; the returned function removes it again."""

        listeners = self._catch_all if type_name is None else self._by_type[type_name]
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def notify(self, type_name: str) -> None:
        listeners = [*self._by_type.get(type_name, ()), *self._catch_all]
        log.debug("Type %s changed; %d listener(s)", type_name, len(listeners))
        for callback in listeners:
            try:
                callback(type_name)
            except Exception:
                log.exception("Change listener failed for type %s", type_name)


if TYPE_CHECKING:
    _notifier_check: ChangeNotifier = TypeChangeEmitter()
