"""
Example that shows how to use the store module
for undo/redo functionality
"""

from reactivity import watch
from reactivity.store import Store, computed, define_store, mutation


class CounterStore(Store):
    @mutation
    def bump_count(self):
        """
        Bump counter by one.

        Note: normally self.state is a readonly proxy on the present
        state, but because this method is decorated with `mutation`
        `self.state` is replaced with the mutable `self._present`
        for the scope of this method to record any changes.
        """
        self.state["count"] += 1

    @mutation
    def adjust_count(self, amount):
        self.state["count"] = amount

    @computed
    def count(self):
        """
        Decorating a method with `computed` will create a property
        on the store instance for easy access.
        """
        return self.state["count"]


def add_todo(store, title):
    store.state["todos"].append({"title": title, "done": False})


def finish(store, index):
    store.state["todos"][index]["done"] = True


use_todos = define_store(
    "todos",
    state=lambda: {"todos": []},
    getters={
        "remaining": lambda store: sum(
            not todo["done"] for todo in store.state["todos"]
        ),
    },
    actions={"add_todo": add_todo, "finish": finish},
)


if __name__ == "__main__":
    store = CounterStore({"count": 0})

    _ = watch(
        lambda: store.state["count"],
        lambda val: print(f"Count is now: {val}"),  # noqa: T201
        immediate=True,
    )

    # Bump the count by one
    store.bump_count()
    # Current state of the store can be accessed through
    # the `state` property on store
    assert store.state["count"] == 1
    # The count is now also accessible as a property because
    # of the computed `count` method defined on CounterStore
    assert store.count == 1

    # Set the count to 5
    store.adjust_count(5)
    assert store.count == 5

    # Undo last change
    store.undo()
    assert store.count == 1

    # Redo it again
    store.redo()
    assert store.count == 5

    todos = use_todos()
    _ = watch(
        lambda: todos.remaining,
        lambda val: print(f"Todos remaining: {val}"),  # noqa: T201
    )
    todos.add_todo("write docs")
    todos.add_todo("release")
    todos.finish(0)

    # Undo finishing the first todo
    todos.undo()
    assert todos.remaining == 2
