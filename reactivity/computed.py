from __future__ import annotations

from typing import Callable, TypeVar
from weakref import WeakMethod

from .context import get_context
from .effect import ReactiveEffect
from .ref import BaseRef
from .traps import ReadonlyError

T = TypeVar("T")


class ComputedRef(BaseRef[T]):
    """
    Cached value derived from reactive state.

    The getter is evaluated lazily on the first read of `value` and then
    only again when some of its dependencies changed in the meantime.
    Effects that read `value` depend on the computed value itself.
    """

    __slots__ = ("_dirty", "_value", "effect")

    def __init__(self, getter: Callable[[], T]) -> None:
        self._dirty = True
        self._value = None
        self.effect = ReactiveEffect(
            getter, lazy=True, scheduler=weak_scheduler(self._invalidate)
        )

    def _invalidate(self, job) -> None:
        # Don't recompute now, just mark the value stale and
        # let whoever depends on this value know about it
        if not self._dirty:
            self._dirty = True
            get_context().trigger(self, "value")

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def value(self) -> T:
        if self._dirty:
            self._value = self.effect.run()
            self._dirty = False
        get_context().track(self, "value")
        return self._value

    @value.setter
    def value(self, new_value) -> None:
        raise ReadonlyError("Computed values are readonly")

    def stop(self) -> None:
        self.effect.stop()

    def __del__(self):
        # unsubscribe from the sources, they might outlive this value
        self.effect.stop()

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else repr(self._value)
        return f"ComputedRef({state})"


def weak_scheduler(method):
    """
    Scheduler that calls the given bound method only while its
    object is alive, so the effect doesn't keep the object alive
    """
    weak_method = WeakMethod(method)

    def schedule(job):
        if (fn := weak_method()) is not None:
            fn(job)

    return schedule


def computed(getter: Callable[[], T]) -> ComputedRef[T]:
    """
    Create a computed value for the given getter. Can be used as a decorator.
    Note: make sure the getter doesn't need any arguments to run
    and that no reactive state is changed within the expression
    """
    return ComputedRef(getter)
