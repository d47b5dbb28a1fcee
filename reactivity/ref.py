from __future__ import annotations

from typing import Generic, TypeVar, Union

from .context import get_context
from .object_utils import has_changed
from .proxy import proxy

T = TypeVar("T")


class BaseRef(Generic[T]):
    """
    Base for objects that expose their reactive state through a
    single `value` property: refs and computed values.
    """

    __slots__ = ("__weakref__",)

    @property
    def value(self) -> T:
        raise NotImplementedError


class Ref(BaseRef[T]):
    """
    Reactive container for a single value. Reading `value` subscribes
    the running effect, assigning a different value notifies subscribers.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def value(self) -> T:
        get_context().track(self, "value")
        return proxy(self._value)

    @value.setter
    def value(self, new_value: T) -> None:
        if has_changed(self._value, new_value):
            self._value = new_value
            get_context().trigger(self, "value")

    def __repr__(self) -> str:
        return f"Ref({self._value!r})"


def ref(value: T) -> Ref[T]:
    if isinstance(value, Ref):
        return value
    return Ref(value)


def is_ref(obj) -> bool:
    return isinstance(obj, BaseRef)


def unref(obj: Union[BaseRef[T], T]) -> T:
    if isinstance(obj, BaseRef):
        return obj.value
    return obj


make_ref = ref
