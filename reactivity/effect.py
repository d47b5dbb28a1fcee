"""
Effects wrap a function so that the reactive state it reads while
running is discovered automatically. Whenever some of that state
changes, the effect runs again (or is handed to its scheduler).
"""

from __future__ import annotations

import logging
from itertools import count
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from .context import DebuggerEvent, get_context
from .dep import Dep
from .scheduler import CallbackScheduler, Scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T")
DebuggerHook = Callable[[DebuggerEvent], Any]

# Every effect gets a unique, increasing id
_ids = count()


class ReactiveEffect(Generic[T]):
    __slots__ = (
        "__weakref__",
        "active",
        "children",
        "deps",
        "fn",
        "id",
        "lazy",
        "on_stop",
        "on_track",
        "on_trigger",
        "scheduler",
    )

    def __init__(
        self,
        fn: Callable[[], T],
        lazy: bool = False,
        scheduler: Union[Scheduler, Callable[[Callable[[], T]], Any], None] = None,
        on_track: Optional[DebuggerHook] = None,
        on_trigger: Optional[DebuggerHook] = None,
        on_stop: Optional[Callable[[], Any]] = None,
    ) -> None:
        """
        lazy: Don't run on creation, call the effect to run it
        scheduler: Receives the run method of this effect when it is
            triggered, instead of running it right away
        """
        self.id = next(_ids)
        self.fn = fn
        self.lazy = lazy
        if scheduler is not None and not isinstance(scheduler, Scheduler):
            scheduler = CallbackScheduler(scheduler)
        self.scheduler = scheduler
        self.on_track = on_track
        self.on_trigger = on_trigger
        self.on_stop = on_stop
        self.deps: list[Dep] = []
        self.children: list[Union[ReactiveEffect, Any]] = []
        self.active = True

    def __call__(self) -> T:
        return self.run()

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"<ReactiveEffect id={self.id} fn={name} active={self.active}>"

    def run(self) -> T:
        if not self.active:
            return self.fn()

        context = get_context()
        self.cleanup()
        context.push_effect(self)
        try:
            return self.fn()
        finally:
            context.pop_effect()

    def trigger(self, target=None, key=None, op="set") -> None:
        """Called by the context when one of the dependencies changed"""
        if not self.active:
            return
        if self.on_trigger:
            self.on_trigger(DebuggerEvent(self, target, key, op))
        if self.scheduler is not None:
            self.scheduler.schedule(self.run)
        else:
            self.run()

    def cleanup(self) -> None:
        """
        Removes this effect from all the deps it subscribed to during
        its last run and stops the effects created during that run.
        """
        for dep in self.deps:
            dep.remove_sub(self)
        self.deps.clear()

        children, self.children = self.children, []
        for child in children:
            child.stop()

    def stop(self) -> None:
        if not self.active:
            return
        self.cleanup()
        self.active = False
        logger.debug("Stopped %r", self)
        if self.on_stop:
            self.on_stop()

    def adopt(self, child) -> None:
        """
        Makes the given effect (or anything with a stop method) a child of
        this one: it will be stopped before this effect runs again
        """
        self.children.append(child)


def attach_to_active(child) -> None:
    """Registers the child with the effect that is currently running, if any"""
    parent = get_context().active_effect
    if parent is not None:
        parent.adopt(child)


def effect(
    fn: Callable[[], T],
    lazy: bool = False,
    scheduler: Union[Scheduler, Callable[[Callable[[], T]], Any], None] = None,
    on_track: Optional[DebuggerHook] = None,
    on_trigger: Optional[DebuggerHook] = None,
    on_stop: Optional[Callable[[], Any]] = None,
) -> ReactiveEffect[T]:
    """
    Creates an effect for the given function and runs it, unless lazy.
    The returned effect can be called to run it again and stopped with
    its `stop` method.
    """
    runner = ReactiveEffect(
        fn,
        lazy=lazy,
        scheduler=scheduler,
        on_track=on_track,
        on_trigger=on_trigger,
        on_stop=on_stop,
    )
    attach_to_active(runner)
    if not lazy:
        runner.run()
    return runner


def stop(runner: ReactiveEffect) -> None:
    runner.stop()


register_subscriber = effect
