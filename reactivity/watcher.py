"""
watchers perform dependency tracking via functions acting on
observable datastructures, and optionally trigger callback when
a change is detected.
"""

from __future__ import annotations

import copy
import inspect
from collections.abc import Awaitable
from functools import partial, wraps
from typing import Any, Callable, Generic, TypeVar, Union
from weakref import ref

try:
    import numpy as np

    has_numpy = True
except ImportError:
    has_numpy = False

from .context import get_context
from .dict_proxy import DictProxyBase
from .effect import ReactiveEffect, attach_to_active
from .list_proxy import ListProxyBase
from .object_proxy import ObjectProxyBase
from .object_utils import get_object_attrs, has_changed
from .proxy import Proxy, to_raw
from .ref import BaseRef
from .scheduler import get_event_loop, scheduler_for

T = TypeVar("T")
Watchable = Union[
    Callable[[], T],
    Callable[[], Awaitable[T]],
    BaseRef[T],
    Proxy[T],
    list,
    tuple,
]
WatchCallback = Union[Callable[[], Any], Callable[[T], Any], Callable[[T, T], Any]]


def watch(
    source: Watchable[T],
    callback: WatchCallback[T],
    immediate: bool = False,
    deep: bool | None = None,
    flush: str = "sync",
) -> Watcher[T]:
    """
    Watch the given source and call the callback with the new and old
    value whenever it changes. The source can be a ref, a reactive object,
    a function or a list of those.

    Returns the watcher, which can be called to stop watching.
    """
    return Watcher(source, callback, immediate=immediate, deep=deep, flush=flush)


def watch_effect(fn: Callable[[], Any], flush: str = "sync") -> Watcher[None]:
    """
    Run the given function and rerun it whenever the reactive
    state that it reads changes.

    Returns the watcher, which can be called to stop watching.
    """
    return Watcher(fn, None, flush=flush)


def traverse(obj, seen=None):
    """
    Recursively traverse the whole tree to make sure
    that all values have been 'get'
    """
    # we are only interested in traversing a fixed set of types
    # otherwise we can just exit
    if isinstance(obj, BaseRef):
        val_iter = iter((obj.value,))
    elif isinstance(obj, (dict, DictProxyBase)):
        val_iter = iter(obj.values())
    elif isinstance(obj, (list, ListProxyBase, set, tuple)):
        val_iter = iter(obj)
    elif isinstance(obj, ObjectProxyBase):
        val_iter = (getattr(obj, attr) for attr in get_object_attrs(obj.__target__))
    else:
        return obj

    # track which objects we have already seen to support
    # full traversal of datastructures with cycles
    # (objects are kept in the dict so that their ids can't be reused)
    if seen is None:
        seen = {}
    seen[id(obj)] = obj
    for v in val_iter:
        if has_numpy and isinstance(v, np.ndarray):
            continue
        if id(v) not in seen:
            traverse(v, seen=seen)
    return obj


def snapshot(value):
    """Structural copy of a (reactive) value"""
    return copy.deepcopy(to_raw(value))


class WrongNumberOfArgumentsError(TypeError):
    """
    Error that is used to signal that the wrong number of arguments is
    used for the callback
    """

    pass


class InvalidSourceError(TypeError):
    """
    Raised when watching something that is not a ref, a reactive object,
    a function or a list of those.
    """

    pass


class Watcher(Generic[T]):
    __slots__ = (
        "__weakref__",
        "_number_of_callback_args",
        "callback",
        "callback_async",
        "deep",
        "effect",
        "flush",
        "fn_async",
        "multi",
        "pending",
        "value",
    )

    def __init__(
        self,
        source: Watchable[T],
        callback: WatchCallback[T] | None = None,
        immediate: bool = False,
        deep: bool | None = None,
        flush: str = "sync",
    ) -> None:
        """
        callback: Method to call when the value has changed. Without
            callback, the source function is the effect itself.
        immediate: Call the callback right away with the initial value
        deep: Deep watch the watched value
        flush: When to run the callback: "sync", "pre" or "post"
        """
        # fail early on unknown flush timings
        scheduler_for(flush)
        self.flush = flush

        self.multi = False
        self.fn_async = False
        if isinstance(source, BaseRef):
            fn = partial(getattr, source, "value")
        elif isinstance(source, Proxy):

            def fn():
                return source

            # Default to deep watching when watching a proxy
            if deep is None:
                deep = True
        elif isinstance(source, (list, tuple)):
            fn = partial(read_sources, tuple(source))
            self.multi = True
        elif callable(source):
            if is_bound_method(source):
                fn = weak(source.__self__, source.__func__)
            else:
                fn = source
            self.fn_async = inspect.iscoroutinefunction(source)
        else:
            raise InvalidSourceError(
                f"Can't watch {type(source).__name__}: expected a ref, "
                "a reactive object, a function or a list of those"
            )

        if callable(callback):
            if is_bound_method(callback):
                self.callback = weak(callback.__self__, callback.__func__)
            else:
                self.callback = callback
            self.callback_async = inspect.iscoroutinefunction(callback)
        else:
            self.callback = None
            self.callback_async = False
        self.deep = bool(deep)
        self._number_of_callback_args = None
        self.pending = []

        self.effect = ReactiveEffect(
            partial(self.get, fn), lazy=True, scheduler=self.schedule
        )
        attach_to_active(self)

        value = self.effect.run()
        self.value = snapshot(value) if self.deep else value
        if immediate and self.callback:
            self.run_callback(value, None)

    def __call__(self) -> None:
        self.stop()

    @property
    def active(self) -> bool:
        return self.effect.active

    def stop(self) -> None:
        self.effect.stop()
        self.pending.clear()

    def get(self, fn) -> Any:
        value_or_coro = fn()
        if self.fn_async and value_or_coro:
            loop = get_event_loop()
            if not loop.is_running():
                value_or_coro = loop.run_until_complete(value_or_coro)
            else:
                loop.create_task(value_or_coro)
                return None
        if self.deep:
            traverse(value_or_coro)
        return value_or_coro

    def schedule(self, job) -> None:
        """Scheduler of the effect: called when a dependency changed"""
        if not self.effect.active:
            return
        if self.flush == "sync":
            self.run()
            return

        queue = scheduler_for(self.flush)
        if self.callback is None:
            queue.schedule(self.run)
            return
        # the new value is taken right away, only the callback waits
        change = self.update()
        if change is not None:
            self.pending.append(change)
            queue.schedule(self.run_pending)

    def run(self) -> None:
        """
        Reruns the source and calls the callback when the value changed.
        Without callback, the source is simply rerun.
        """
        if not self.effect.active:
            return
        if self.callback is None:
            self.effect.run()
            return
        change = self.update()
        if change is not None:
            self.run_callback(*change)

    def update(self) -> tuple[Any, Any] | None:
        """
        Reruns the source and stores the new value. Returns the new and
        old value when the callback is due.
        """
        value = self.effect.run()
        if self.deep or self.multi or has_changed(self.value, value):
            old_value = self.value
            self.value = snapshot(value) if self.deep else value
            return value, old_value
        return None

    def run_pending(self) -> None:
        """Calls the callback for each change recorded since the last flush"""
        pending, self.pending = self.pending, []
        for new, old in pending:
            if not self.effect.active:
                return
            self.run_callback(new, old)

    def run_callback(self, new, old) -> None:
        """
        Runs the callback. When the number of arguments is still unknown
        for the callback, it will fall into the try/except contstruct
        to figure out the right number of arguments.
        After running the callback one time, the number of arguments
        is known and the callback can be called with the correct
        amount of arguments.
        """
        with get_context().untracked():
            if self._number_of_callback_args is not None:
                if self._number_of_callback_args == 1:
                    maybe_coro = self.callback(new)
                elif self._number_of_callback_args == 2:
                    maybe_coro = self.callback(new, old)
                else:
                    maybe_coro = self.callback()
            else:
                try:
                    maybe_coro = self._run_callback(new, old)
                    self._number_of_callback_args = 2
                except WrongNumberOfArgumentsError:
                    try:
                        maybe_coro = self._run_callback(new)
                        self._number_of_callback_args = 1
                    except WrongNumberOfArgumentsError:
                        maybe_coro = self._run_callback()
                        self._number_of_callback_args = 0

        if self.callback_async and maybe_coro:
            loop = get_event_loop()
            if not loop.is_running():
                loop.run_until_complete(maybe_coro)
            else:
                loop.create_task(maybe_coro)

    def _run_callback(self, *args) -> Any:
        """
        Run the callback with the given arguments. When the callback
        raises a TypeError, check to see if the error results from
        within the callback or from calling the callback with the
        wrong number of arguments.
        Raises WrongNumberOfArgumentsError if callback was called
        with the wrong number of arguments.
        """
        try:
            return self.callback(*args)
        except TypeError as e:
            frames = inspect.trace()
            try:
                if len(frames) != 1:
                    raise
                raise WrongNumberOfArgumentsError(str(e)) from e
            finally:
                del frames


def read_sources(sources):
    """Reads the current value of each of the watched sources"""
    values = []
    for source in sources:
        if isinstance(source, BaseRef):
            values.append(source.value)
        elif callable(source) and not isinstance(source, Proxy):
            values.append(source())
        else:
            values.append(source)
    return values


def weak(obj: Any, method: Callable) -> Callable:
    """
    Returns a wrapper for the given method that will only call the method if the
    given object is not garbage collected yet. It does so by using a weakref.ref
    and checking its value before calling the actual method when the wrapper is
    called.

    The wrapper accepts the same number of arguments as the method (without
    self), which the watcher relies on to detect how to call it.
    """
    weak_obj = ref(obj)
    nr_arguments = len(inspect.signature(method).parameters) - 1

    if nr_arguments == 0:

        def wrapped():
            if (this := weak_obj()) is not None:
                return method(this)

    elif nr_arguments == 1:

        def wrapped(new):
            if (this := weak_obj()) is not None:
                return method(this, new)

    elif nr_arguments == 2:

        def wrapped(new, old):
            if (this := weak_obj()) is not None:
                return method(this, new, old)

    else:
        raise WrongNumberOfArgumentsError(
            "Please use 1, 2 or 3 arguments for callbacks"
        )

    return wraps(method)(wrapped)


def is_bound_method(fn: Callable) -> bool:
    """
    Returns whether the given function is a bound method.
    """
    return hasattr(fn, "__self__") and hasattr(fn, "__func__")
