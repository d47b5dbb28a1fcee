"""
Deps hold the subscribers of a single key of an observed target.
They are stored in the TargetMap and referenced back by every
effect that subscribed to them, so an effect can detach itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .effect import ReactiveEffect


class Dep:
    __slots__ = ("__weakref__", "_subs", "key")

    def __init__(self, key=None) -> None:
        self.key = key
        # a dict is used as an ordered set: subscribers are
        # notified in the order in which they first subscribed
        self._subs: dict[ReactiveEffect, None] = {}

    def add_sub(self, sub: ReactiveEffect) -> None:
        self._subs[sub] = None

    def remove_sub(self, sub: ReactiveEffect) -> None:
        self._subs.pop(sub, None)

    def subscribers(self) -> list[ReactiveEffect]:
        """Snapshot of the current subscribers, safe to iterate while notifying"""
        return list(self._subs)

    def __contains__(self, sub) -> bool:
        return sub in self._subs

    def __iter__(self) -> Iterator[ReactiveEffect]:
        return iter(self._subs)

    def __len__(self) -> int:
        return len(self._subs)

    def __repr__(self) -> str:
        return f"<Dep key={self.key!r} subs={len(self._subs)}>"
