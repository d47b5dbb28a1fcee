"""
Store that keeps its state readonly for the outside world and records
every change made through its mutations, to enable undo/redo.
"""

import copy
import logging
from functools import partial, wraps
from typing import Callable, Generic, TypeVar

import patchdiff

from .computed import computed as computed_ref
from .proxy import reactive, readonly, shallow_reactive, to_raw

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Callable)


def mutation(fn: T) -> T:
    @wraps(fn)
    def inner(self, *args, **kwargs):
        readonly_state = self.state
        self.state = self._present
        try:
            current = to_raw(self._present)
            result = fn(self, *args, **kwargs)
            ops, reverse_ops = patchdiff.diff(current, to_raw(self._present))
            # If ops and reverse_ops are empty, that means
            # that there are no actual changes to record
            if self._strict or ops or reverse_ops:
                if not ops and not reverse_ops:
                    raise RuntimeError(
                        "Calling mutation didn't result in any change to state"
                    )

                self._past.append((ops, reverse_ops))
                self._future.clear()
        finally:
            self.state = readonly_state
        return result

    return inner


def computed(fn: T) -> T:
    """Marks a store method as a cached property of the store"""
    fn.decorator = "computed"
    return fn


S = TypeVar("S")


class Store(Generic[S]):
    """
    Store that tracks mutations to state in order to enable undo/redo functionality
    """

    def __init__(self, state: S, strict=True):
        """
        Creates a store with the given state as the initial state.
        When `strict` is False, calling mutations that do not result
        in an actual change will be ignored.
        """
        self._computed_props = {}
        self._strict = strict
        self._initial = copy.deepcopy(to_raw(state))
        self._present = reactive(state)
        self._past = shallow_reactive([])
        self._future = shallow_reactive([])
        self.state = readonly(state)

        for method_name in dir(type(self)):
            fn = getattr(type(self), method_name, None)
            if getattr(fn, "decorator", None) == "computed":
                self._computed_props[method_name] = computed_ref(partial(fn, self))

    def __getattribute__(self, name):
        super_getattribute = super().__getattribute__
        computed_prop = super_getattribute("_computed_props").get(name)
        if computed_prop is not None:
            # Read the computed value in order to make
            # it behave like a property on the Store
            return computed_prop.value
        return super_getattribute(name)

    @property
    def can_undo(self) -> bool:
        """
        Returns whether the store can undo some mutation
        """
        return len(self._past) > 0

    @property
    def can_redo(self) -> bool:
        """
        Returns whether the store can redo some mutation
        """
        return len(self._future) > 0

    def undo(self):
        """
        Undoes the last mutation
        """
        if not self.can_undo:
            return

        ops, reverse_ops = self._past.pop()
        patchdiff.iapply(self._present, reverse_ops)
        self._future.append((ops, reverse_ops))

    def redo(self):
        """
        Redoes the next mutation
        """
        if not self.can_redo:
            return

        ops, reverse_ops = self._future.pop()
        patchdiff.iapply(self._present, ops)
        self._past.append((ops, reverse_ops))

    @mutation
    def patch(self, partial_state: dict):
        """
        Assigns the given keys of the state. Can be undone like any mutation.
        """
        for key, value in partial_state.items():
            self.state[key] = value

    @mutation
    def reset(self):
        """
        Puts back the state that the store was created with
        """
        initial = copy.deepcopy(self._initial)
        for key in [key for key in self.state if key not in initial]:
            del self.state[key]
        for key, value in initial.items():
            if to_raw(self.state.get(key)) != value:
                self.state[key] = value


_stores = {}


def define_store(store_id, state, getters=None, actions=None):
    """
    Defines a store with the given id and returns a function that
    returns the one instance of that store, created on first use.

    state: function that returns the initial state (a dict)
    getters: dict of functions that take the store and return a derived
        value, available as attributes of the store
    actions: dict of functions that take the store (and arguments) and
        change its state; they can be undone like mutations
    """
    namespace = {}
    for name, getter in (getters or {}).items():
        namespace[name] = computed(getter)
    for name, action in (actions or {}).items():
        namespace[name] = mutation(action)
    store_type = type(f"Store[{store_id}]", (Store,), namespace)

    def use_store():
        if store_id not in _stores:
            logger.debug("Creating store %r", store_id)
            _stores[store_id] = store_type(state(), strict=False)
        return _stores[store_id]

    use_store.store_id = store_id
    return use_store


def clear_stores():
    """Forgets all the store instances created by `define_store`"""
    _stores.clear()
