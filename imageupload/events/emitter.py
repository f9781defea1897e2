"""Ordered observer registry.

Listeners are kept per event name, sorted by priority (highest first) and,
within one priority, by registration order. ``fire`` calls them synchronously;
a listener may call ``EventInfo.stop()`` to prevent the remaining listeners
from running. Exceptions raised by a listener propagate to the caller of
``fire``.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum
from itertools import count
from typing import Any


class Priority(IntEnum):
    HIGHEST = 100000
    HIGH = 1000
    NORMAL = 0
    LOW = -1000
    LOWEST = -100000


Listener = Callable[..., None]


@dataclass
class EventInfo:
    """Passed as the first argument to every listener."""

    name: str
    source: object
    stopped: bool = False

    def stop(self) -> None:
        self.stopped = True


@dataclass(order=True)
class _Registration:
    sort_key: tuple[int, int]
    callback: Listener = field(compare=False)


class Emitter:
    """Mixin giving a class ``on``/``off``/``fire``."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Registration]] = {}
        self._sequence = count()

    def on(self, name: str, callback: Listener, priority: int = Priority.NORMAL) -> None:
        registrations = self._listeners.setdefault(name, [])
        registrations.append(_Registration((-int(priority), next(self._sequence)), callback))
        registrations.sort()

    def off(self, name: str, callback: Listener) -> None:
        registrations = self._listeners.get(name, [])
        self._listeners[name] = [r for r in registrations if r.callback != callback]

    def fire(self, name: str, *args: Any) -> EventInfo:
        info = EventInfo(name=name, source=self)
        # Snapshot so listeners may subscribe/unsubscribe while firing.
        for registration in list(self._listeners.get(name, [])):
            registration.callback(info, *args)
            if info.stopped:
                break
        return info
