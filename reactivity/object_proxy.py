"""
Proxies for plain user objects. The stateful attributes of an object
(instance __dict__ entries and __slots__) are its observed keys.
"""

from .context import get_context
from .object_utils import get_object_attrs, has_changed
from .proxy import TYPE_LOOKUP, Proxy, proxy
from .ref import BaseRef
from .target_map import ITERATE_KEY
from .traps import ReadonlyError


class ObjectProxyBase(Proxy):
    def __getattribute__(self, name):
        if name in Proxy.__slots__:
            return super().__getattribute__(name)

        target = self.__target__
        if name not in get_object_attrs(target):
            if not hasattr(type(target), name):
                # missing attribute: subscribe to it so that
                # assigning it later on notifies the reader
                get_context().track(target, name)
            return getattr(target, name)

        get_context().track(target, name)
        value = getattr(target, name)
        if self.__shallow__:
            return value
        return proxy(value, readonly=self.__readonly__)

    def __setattr__(self, name, value):
        if name in Proxy.__slots__:
            return super().__setattr__(name, value)

        if self.__readonly__:
            raise ReadonlyError(f"Can't set attribute {name!r} on a readonly object")

        target = self.__target__
        is_new = name not in get_object_attrs(target)
        old_value = None if is_new else getattr(target, name, None)
        setattr(target, name, value)

        if is_new and name not in get_object_attrs(target):
            # the set attr is not stateful (e.g. someone
            # is attaching a property value) so there is
            # nothing to notify
            return

        if is_new:
            get_context().trigger(target, name, ITERATE_KEY, op="add")
        elif has_changed(old_value, getattr(target, name, None)):
            get_context().trigger(target, name)

    def __delattr__(self, name):
        if name in Proxy.__slots__:
            return super().__delattr__(name)

        if self.__readonly__:
            raise ReadonlyError(
                f"Can't delete attribute {name!r} on a readonly object"
            )

        target = self.__target__
        is_target_attr = name in get_object_attrs(target)
        delattr(target, name)

        if is_target_attr:
            get_context().trigger(target, name, ITERATE_KEY, op="delete")


def passthrough(method):
    def trap(self, *args, **kwargs):
        fn = getattr(self.__target__, method, None)
        if fn is None:
            # not cached, the class of the target might be modified later on
            raise TypeError(f"object of type '{type(self)}' has no {method}")
        return fn(*args, **kwargs)

    trap.__name__ = method
    return trap


# Special methods are looked up on the type, so the proxy type has to
# define them in order to forward them to the wrapped object
magic_methods = [
    # comparison and conversion
    "__bytes__",
    "__complex__",
    "__eq__",
    "__float__",
    "__format__",
    "__ge__",
    "__gt__",
    "__index__",
    "__int__",
    "__le__",
    "__lt__",
    "__ne__",
    "__repr__",
    "__round__",
    "__str__",
    # container protocol
    "__contains__",
    "__delitem__",
    "__getitem__",
    "__iter__",
    "__len__",
    "__length_hint__",
    "__next__",
    "__reversed__",
    "__setitem__",
    # callables and context managers
    "__call__",
    "__enter__",
    "__exit__",
    "__aenter__",
    "__aexit__",
    "__aiter__",
    "__anext__",
    "__await__",
    # numeric operators
    "__abs__",
    "__add__",
    "__and__",
    "__divmod__",
    "__floordiv__",
    "__invert__",
    "__lshift__",
    "__matmul__",
    "__mod__",
    "__mul__",
    "__neg__",
    "__or__",
    "__pos__",
    "__pow__",
    "__rshift__",
    "__sub__",
    "__truediv__",
    "__xor__",
    "__radd__",
    "__rand__",
    "__rfloordiv__",
    "__rmatmul__",
    "__rmod__",
    "__rmul__",
    "__ror__",
    "__rpow__",
    "__rsub__",
    "__rtruediv__",
    "__rxor__",
]


def truth(self):
    return bool(self.__target__)


ObjectProxy = type(
    "ObjectProxy",
    (ObjectProxyBase,),
    {
        "__bool__": truth,
        **{method: passthrough(method) for method in magic_methods},
    },
)


class ReadonlyObjectProxy(ObjectProxy):
    def __init__(self, target, shallow=False, **kwargs):
        super().__init__(target, shallow=shallow, **{**kwargs, "readonly": True})


def type_test(target):
    # exclude builtin objects
    # exclude objects for which we have better proxies available
    # exclude refs, which are reactive already
    # exclude ndarrays
    return (
        not isinstance(target, (list, set, dict, tuple, BaseRef))
        and type(target).__module__ not in (object.__module__, "numpy")
        and not isinstance(target, type)
    )


TYPE_LOOKUP[type_test] = (ObjectProxy, ReadonlyObjectProxy)
