"""
The reactivity context holds the process-wide tracking state: the stack
of running effects and the dependency store. Reads call `track` to
subscribe the active effect, writes call `trigger` to notify subscribers.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .target_map import TargetMap

if TYPE_CHECKING:
    from .effect import ReactiveEffect


@dataclass
class DebuggerEvent:
    """Passed to the on_track and on_trigger hooks of an effect"""

    effect: ReactiveEffect
    target: Any
    key: Any
    type: str


class ReactivityContext:
    __slots__ = ("__weakref__", "stack", "target_map")

    def __init__(self) -> None:
        self.stack: list[Optional[ReactiveEffect]] = []
        self.target_map = TargetMap()

    @property
    def active_effect(self) -> Optional[ReactiveEffect]:
        if self.stack:
            return self.stack[-1]
        return None

    def push_effect(self, effect: Optional[ReactiveEffect]) -> None:
        self.stack.append(effect)

    def pop_effect(self) -> Optional[ReactiveEffect]:
        return self.stack.pop()

    @contextmanager
    def untracked(self) -> Iterator[None]:
        """Reads within this block are not attributed to any effect"""
        self.stack.append(None)
        try:
            yield
        finally:
            self.stack.pop()

    def track(self, target, key) -> None:
        effect = self.active_effect
        if effect is None:
            return
        dep = self.target_map.get_dep(target, key, create=True)
        if effect in dep:
            return
        dep.add_sub(effect)
        effect.deps.append(dep)
        if effect.on_track:
            effect.on_track(DebuggerEvent(effect, target, key, "get"))

    def trigger(self, target, *keys, op="set") -> None:
        """
        Notifies the subscribers of the given keys of the target. An effect
        that subscribed to several of the keys is notified only once.
        """
        effects = {}
        target_map = self.target_map
        for key in keys:
            dep = target_map.get_dep(target, key)
            if dep:
                for effect in dep.subscribers():
                    effects.setdefault(effect, key)
        if not effects:
            return
        active = self.active_effect
        for effect, key in effects.items():
            # Skip the effect that is running right now, so that
            # something like `state["count"] += 1` in an effect
            # does not make it rerun itself
            if effect is active:
                continue
            effect.trigger(target, key, op)


_context = ReactivityContext()


def get_context() -> ReactivityContext:
    return _context


def set_context(context: ReactivityContext) -> ReactivityContext:
    """Installs the given context and returns the previous one"""
    global _context
    previous, _context = _context, context
    return previous


def track(target, key) -> None:
    _context.track(target, key)


def trigger(target, *keys, op="set") -> None:
    _context.trigger(target, *keys, op=op)
