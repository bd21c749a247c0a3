"""User-facing notifications (the toast channel of the front end)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"  # default/destructive
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


Notifier = Callable[[Notification], None]


class NotificationLog:
    """Collects notifications so a request handler can return them."""

    def __init__(self) -> None:
        self._items: list[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self._items.append(notification)

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    def drain(self) -> list[Notification]:
        items, self._items = self._items, []
        return items


def discard(notification: Notification) -> None:
    pass
