"""Weakly referenced listener registry used for change notifications."""

import logging
import weakref
from collections.abc import Callable
from typing import Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DailyWeatherListener(Protocol):
    def daily_weather_changed(self) -> None: ...


class ListenerSet(Generic[T]):
    """Holds listeners by weak reference, keyed by identity.

    Listeners that are garbage collected drop out on their own; ``remove`` is
    still the way to unsubscribe deterministically.
    """

    def __init__(self) -> None:
        self._refs: dict[int, weakref.ref[T]] = {}

    def add(self, listener: T) -> None:
        key = id(listener)
        self._refs[key] = weakref.ref(listener, self._make_pruner(key))

    def remove(self, listener: T) -> None:
        ref = self._refs.get(id(listener))
        if ref is not None and ref() is listener:
            del self._refs[id(listener)]

    def __contains__(self, listener: object) -> bool:
        ref = self._refs.get(id(listener))
        return ref is not None and ref() is listener

    def __len__(self) -> int:
        return sum(1 for ref in self._refs.values() if ref() is not None)

    def enumerate_listeners(self, action: Callable[[T], None]) -> None:
        """Call ``action`` once for every live listener."""
        for ref in list(self._refs.values()):
            listener = ref()
            if listener is None:
                continue
            try:
                action(listener)
            except Exception:
                logger.exception("Listener %r failed during notification", listener)

    def _make_pruner(self, key: int) -> Callable[["weakref.ref[T]"], None]:
        def _prune(ref: "weakref.ref[T]") -> None:
            # The id may already belong to a newer listener
            if self._refs.get(key) is ref:
                del self._refs[key]

        return _prune
