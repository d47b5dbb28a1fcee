from unittest.mock import Mock

import pytest

from reactivity import ReadonlyError, effect, reactive, readonly, to_raw
from reactivity.object_proxy import ObjectProxy, ReadonlyObjectProxy


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def length_squared(self):
        return self.x**2 + self.y**2

    def __repr__(self):
        return f"Point({self.x}, {self.y})"


class Slotted:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


class Sized:
    def __init__(self):
        self.items = []

    def __len__(self):
        return len(self.items)


def test_object_proxy_types():
    assert isinstance(reactive(Point(1, 2)), ObjectProxy)
    assert isinstance(readonly(Point(1, 2)), ReadonlyObjectProxy)
    # classes are not proxied
    assert reactive(Point) is Point


def test_object_proxy_isinstance():
    point = reactive(Point(1, 2))
    assert isinstance(point, Point)
    assert to_raw(point).__class__ is Point


def test_object_attribute_tracking():
    point = reactive(Point(1, 2))
    x = Mock(side_effect=lambda: point.x)
    y = Mock(side_effect=lambda: point.y)

    effect(x)
    effect(y)

    point.x = 10
    assert x.call_count == 2
    assert y.call_count == 1

    point.x = 10
    assert x.call_count == 2


def test_object_new_attribute():
    point = reactive(Point(1, 2))
    fn = Mock(side_effect=lambda: getattr(point, "z", None))

    effect(fn)
    point.z = 3
    assert fn.call_count == 2
    assert point.z == 3

    point.z = 4
    assert fn.call_count == 3

    del point.z
    assert fn.call_count == 4
    assert not hasattr(point, "z")


def test_object_slots():
    obj = reactive(Slotted(1))
    fn = Mock(side_effect=lambda: obj.value)

    effect(fn)
    obj.value = 2
    assert fn.call_count == 2
    assert obj.value == 2


def test_object_nested_values():
    point = reactive(Point({"a": 1}, [1]))
    fn = Mock(side_effect=lambda: point.x["a"])

    effect(fn)
    point.x["a"] = 2
    assert fn.call_count == 2

    point.y.append(2)
    assert fn.call_count == 2
    assert to_raw(point).y == [1, 2]


def test_object_methods_passthrough():
    point = reactive(Point(3, 4))
    assert point.length_squared() == 25
    assert repr(point) == "Point(3, 4)"
    assert bool(point)


def test_object_magic_methods():
    obj = reactive(Sized())
    assert len(obj) == 0
    # truthiness of the wrapped object is kept
    assert not obj

    obj.items.append(1)
    assert len(obj) == 1
    assert obj


def test_object_missing_magic_method():
    point = reactive(Point(1, 2))
    with pytest.raises(TypeError):
        len(point)


def test_object_readonly():
    point = readonly(Point(1, {"a": 1}))

    with pytest.raises(ReadonlyError):
        point.x = 2
    with pytest.raises(ReadonlyError):
        del point.x
    with pytest.raises(ReadonlyError):
        point.y["a"] = 2

    assert point.x == 1
