import gc
import weakref

from reactivity import ITERATE_KEY, computed, effect, reactive, ref
from reactivity.dep import Dep
from reactivity.target_map import TargetMap


class Point:
    def __init__(self):
        self.x = 0


def test_get_dep_missing():
    target_map = TargetMap()
    target = {}
    assert target_map.get_dep(target, "a") is None
    assert target not in target_map


def test_get_dep_create():
    target_map = TargetMap()
    target = {}
    dep = target_map.get_dep(target, "a", create=True)
    assert isinstance(dep, Dep)
    assert dep.key == "a"
    assert target_map.get_dep(target, "a") is dep
    assert target_map.get_dep(target, "b") is None


def test_dispose():
    target_map = TargetMap()
    target = {}
    target_map.get_dep(target, "a", create=True)
    target_map.dispose(target)
    assert target not in target_map
    # disposing twice is fine
    target_map.dispose(target)


def test_dep_subscribers(context):
    data = {"a": 1}
    state = reactive(data)
    first = effect(lambda: state["a"])
    second = effect(lambda: len(state))

    dep = context.target_map.get_dep(data, "a")
    assert list(dep) == [first]
    assert list(context.target_map.get_dep(data, ITERATE_KEY)) == [second]

    first.stop()
    assert len(dep) == 0


def test_unreferenced_targets_are_swept(context):
    count = ref(0)
    runner = effect(lambda: count.value)
    assert count in context.target_map

    runner.stop()
    del runner
    del count
    gc.collect()
    assert len(context.target_map) == 0


def test_referenced_targets_are_kept(context):
    count = ref(0)
    effect(lambda: count.value)
    gc.collect()
    assert count in context.target_map


def test_tracked_computed_is_released(context):
    count = ref(1)
    double = computed(lambda: count.value * 2)
    runner = effect(lambda: double.value)
    assert double in context.target_map

    weak_count = weakref.ref(count)
    weak_double = weakref.ref(double)
    runner.stop()
    del runner, double, count
    gc.collect()

    assert weak_count() is None
    assert weak_double() is None
    assert len(context.target_map) == 0


def test_dropped_computed_unsubscribes(context):
    count = ref(1)
    double = computed(lambda: count.value * 2)
    assert double.value == 2
    assert len(context.target_map.get_dep(count, "value")) == 1

    del double
    gc.collect()
    assert len(context.target_map.get_dep(count, "value")) == 0


def test_self_referencing_dict_is_released(context):
    data = {"a": 1}
    data["self"] = data
    state = reactive(data)
    runner = effect(lambda: state["a"])
    assert data in context.target_map

    runner.stop()
    del runner, data, state
    gc.collect()
    assert len(context.target_map) == 0


def test_self_referencing_object_is_released(context):
    point = Point()
    point.self = point
    state = reactive(point)
    runner = effect(lambda: state.x)

    weak_point = weakref.ref(point)
    runner.stop()
    del runner, point, state
    gc.collect()
    assert weak_point() is None
    assert len(context.target_map) == 0
