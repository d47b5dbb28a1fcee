from functools import partial, wraps

from .context import get_context
from .object_utils import has_changed
from .proxy import TYPE_LOOKUP, proxy
from .target_map import ITERATE_KEY


class ReadonlyError(Exception):
    """
    Raised when a readonly proxy is modified.
    """

    pass


def read_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        get_context().track(self.__target__, ITERATE_KEY)
        value = fn(self.__target__, *args, **kwargs)
        if self.__shallow__:
            return value
        return proxy(value, readonly=self.__readonly__)

    return trap


def iterate_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        get_context().track(self.__target__, ITERATE_KEY)
        iterator = fn(self.__target__, *args, **kwargs)
        if self.__shallow__:
            return iterator
        if method == "items":
            return (
                (key, proxy(value, readonly=self.__readonly__))
                for key, value in iterator
            )
        else:
            proxied = partial(proxy, readonly=self.__readonly__)
            return map(proxied, iterator)

    return trap


def read_key_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        get_context().track(self.__target__, args[0])
        value = fn(self.__target__, *args, **kwargs)
        if self.__shallow__:
            return value
        return proxy(value, readonly=self.__readonly__)

    return trap


def list_changed(old, new):
    return len(old) != len(new) or any(
        has_changed(before, after) for before, after in zip(old, new)
    )


def write_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        target = self.__target__
        old = target.copy()
        retval = fn(target, *args, **kwargs)
        context = get_context()
        if obj_cls is dict:
            changed = [
                key
                for key, val in target.items()
                if key not in old or has_changed(old[key], val)
            ]
            if changed:
                context.trigger(target, *changed, ITERATE_KEY)
        elif list_changed(old, target):
            context.trigger(target, ITERATE_KEY)

        if retval is target:
            # in-place operators should keep returning the proxy
            return self
        return retval

    return trap


def write_key_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        target = self.__target__
        key = args[0]
        is_new = key not in target
        old_value = target.get(key)
        retval = fn(target, *args, **kwargs)
        if method == "setdefault" and not self.__shallow__:
            # This method is only available when readonly is false
            retval = proxy(retval)

        if is_new or has_changed(old_value, target[key]):
            get_context().trigger(
                target, key, ITERATE_KEY, op="add" if is_new else "set"
            )
        return retval

    return trap


def delete_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        target = self.__target__
        old_keys = list(target)
        retval = fn(target, *args, **kwargs)
        removed = [key for key in old_keys if key not in target]
        if removed:
            get_context().trigger(target, *removed, ITERATE_KEY, op="delete")
        return retval

    return trap


def delete_key_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        target = self.__target__
        key = args[0]
        existed = key in target
        retval = fn(target, *args, **kwargs)
        if existed:
            get_context().trigger(target, key, ITERATE_KEY, op="delete")
        return retval

    return trap


trap_map = {
    "READERS": read_trap,
    "KEYREADERS": read_key_trap,
    "ITERATORS": iterate_trap,
    "WRITERS": write_trap,
    "KEYWRITERS": write_key_trap,
    "DELETERS": delete_trap,
    "KEYDELETERS": delete_key_trap,
}


def readonly_trap(method, obj_cls):
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        raise ReadonlyError(f"Can't call {method} on a readonly {obj_cls.__name__}")

    return trap


trap_map_readonly = {
    "READERS": read_trap,
    "KEYREADERS": read_key_trap,
    "ITERATORS": iterate_trap,
    "WRITERS": readonly_trap,
    "KEYWRITERS": readonly_trap,
    "DELETERS": readonly_trap,
    "KEYDELETERS": readonly_trap,
}


def construct_methods_traps_dict(obj_cls, traps, trap_map):
    return {
        method: trap_map[trap_type](method, obj_cls)
        for trap_type, methods in traps.items()
        for method in methods
    }


def define_proxy_types(name, base, obj_cls, traps):
    """
    Generates the writable and the readonly proxy type for instances
    of `obj_cls` from the given table of method names per trap type,
    and registers them so that `proxy` wraps such instances with them.
    """

    def readonly_init(self, target, shallow=False, **kwargs):
        base.__init__(self, target, shallow=shallow, **{**kwargs, "readonly": True})

    def type_test(target):
        return isinstance(target, obj_cls)

    writable_type = type(
        name,
        (base,),
        {
            "__module__": base.__module__,
            **construct_methods_traps_dict(obj_cls, traps, trap_map),
        },
    )
    readonly_type = type(
        f"Readonly{name}",
        (base,),
        {
            "__module__": base.__module__,
            "__init__": readonly_init,
            **construct_methods_traps_dict(obj_cls, traps, trap_map_readonly),
        },
    )
    TYPE_LOOKUP[type_test] = (writable_type, readonly_type)
    return writable_type, readonly_type
