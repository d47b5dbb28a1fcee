from functools import cache
from itertools import chain


@cache
def get_class_slots(cls):
    """utility to collect all __slots__ entries for a given type and its supertypes"""
    return set(
        chain.from_iterable(getattr(klass, "__slots__", []) for klass in cls.__mro__)
    )


def get_object_attrs(obj):
    """utility to collect all stateful attributes of an object"""
    attrs = get_class_slots(type(obj))
    try:
        obj_keys = vars(obj).keys()
        if obj_keys:
            attrs = attrs.copy()
            attrs.update(obj_keys)
    except TypeError:
        pass
    return attrs


SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)


def has_changed(old, new):
    """
    Returns whether assigning `new` over `old` counts as a change.

    Scalars are compared by type and value, everything else by identity.
    Note that this means a nan is always considered changed, even when
    it is assigned to itself.
    """
    if isinstance(old, SCALAR_TYPES) and isinstance(new, SCALAR_TYPES):
        return type(old) is not type(new) or old != new
    return old is not new
