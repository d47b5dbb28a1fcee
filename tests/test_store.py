from unittest.mock import Mock

import pytest

from reactivity import ReadonlyError, watch
from reactivity.store import Store, computed, define_store, mutation


class CustomStore(Store):
    @mutation
    def bump_count(self):
        self.state["count"] += 1

    @computed
    def double(self):
        return self.state["count"] * 2


def test_store_undo_redo():
    store = CustomStore(state={"count": 0})
    assert store.state["count"] == 0
    assert not store.can_undo
    assert not store.can_redo

    store.bump_count()
    assert store.state["count"] == 1
    assert not store.can_redo

    store.undo()
    assert store.state["count"] == 0
    assert not store.can_undo
    assert store.can_redo

    store.redo()
    assert store.state["count"] == 1
    assert store.can_undo
    assert not store.can_redo

    store.bump_count()
    assert store.state["count"] == 2
    assert store.can_undo
    assert not store.can_redo

    store.undo()
    store.undo()
    assert store.state["count"] == 0
    assert not store.can_undo
    assert store.can_redo

    store.bump_count()
    assert store.can_undo
    assert not store.can_redo


def test_store_undo_redo_nothing_to_do():
    store = CustomStore(state={"count": 0})
    store.undo()
    store.redo()
    assert store.state["count"] == 0


def test_store_state_is_readonly():
    store = CustomStore(state={"count": 0})
    with pytest.raises(ReadonlyError):
        store.state["count"] = 1


def test_store_computed_methods():
    store = CustomStore(state={"count": 0})

    assert store.state["count"] == 0
    assert store.double == 0

    store.bump_count()

    assert store.state["count"] == 1
    assert store.double == 2


def test_store_watch_state():
    store = CustomStore(state={"count": 0})
    callback = Mock()
    watch(lambda: store.state["count"], callback)

    store.bump_count()
    callback.assert_called_once_with(1, 0)

    store.undo()
    callback.assert_called_with(0, 1)


def test_store_undo_redo_unchanged_watcher():
    store = CustomStore(state={"count": 0, "foo": {}})
    callback = Mock()
    watch(lambda: store.state["foo"], callback)

    store.bump_count()
    assert store.state["count"] == 1
    callback.assert_not_called()

    store.undo()
    assert store.state["count"] == 0
    callback.assert_not_called()


def test_store_undo_redo_nested():
    class NestedStore(Store):
        @mutation
        def append(self, item):
            self.state["list"].append(item)

        @mutation
        def set(self, key, value):
            self.state["dict"][key] = value

    store = NestedStore({"list": ["a"], "dict": {"a": "b"}})

    store.append("b")
    assert store.state["list"] == ["a", "b"]
    store.undo()
    assert store.state["list"] == ["a"]

    store.set("b", "c")
    assert store.state["dict"] == {"a": "b", "b": "c"}
    store.undo()
    assert store.state["dict"] == {"a": "b"}
    store.redo()
    assert store.state["dict"] == {"a": "b", "b": "c"}


def test_store_empty_mutation_non_strict_store():
    class SimpleStore(Store):
        @mutation
        def update_count(self, count):
            self.state["count"] = count

    # Create a store with strict set to False
    store = SimpleStore({"count": 1}, strict=False)
    assert store.state["count"] == 1
    assert not store.can_undo

    # Update with the same number. This should
    # result in no change being recorded
    store.update_count(1)
    assert not store.can_undo

    # Check that if we do supply another number
    # that a change will actually be recorded
    store.update_count(2)
    assert store.can_undo


def test_store_empty_mutation_strict_store():
    class SimpleStore(Store):
        @mutation
        def update_count(self, count):
            self.state["count"] = count

    store = SimpleStore({"count": 1})

    with pytest.raises(RuntimeError):
        store.update_count(1)

    # the state is readonly again after the error
    with pytest.raises(ReadonlyError):
        store.state["count"] = 2


def test_store_patch_and_reset():
    store = CustomStore(state={"count": 0, "name": "counter"})

    store.patch({"count": 5, "extra": True})
    assert store.state["count"] == 5
    assert store.state["extra"]
    assert store.double == 10

    store.reset()
    assert dict(store.state) == {"count": 0, "name": "counter"}
    assert store.double == 0

    store.undo()
    assert store.state["count"] == 5
    assert store.state["extra"]


def test_define_store():
    use_counter = define_store(
        "counter",
        state=lambda: {"count": 0},
        getters={"double": lambda store: store.state["count"] * 2},
        actions={
            "increment": lambda store, amount=1: store.state.__setitem__(
                "count", store.state["count"] + amount
            ),
        },
    )
    assert use_counter.store_id == "counter"

    store = use_counter()
    assert use_counter() is store
    assert store.double == 0

    store.increment()
    store.increment(2)
    assert store.state["count"] == 3
    assert store.double == 6

    store.undo()
    assert store.state["count"] == 1


def test_define_store_non_strict():
    def set_count(store, count):
        store.state["count"] = count

    use_store = define_store(
        "settings", state=lambda: {"count": 0}, actions={"set_count": set_count}
    )
    store = use_store()

    # no change: no error and nothing to undo
    store.set_count(0)
    assert not store.can_undo
