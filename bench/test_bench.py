from functools import partial

import pytest

from reactivity import computed, effect, reactive, ref, watch


def noop():
    pass


N = 10000


def bench_dict(plain, add_watcher):
    for _ in range(N):
        obj = {} if plain else reactive({})
        if add_watcher:
            watcher = watch(obj, callback=noop, deep=True)  # noqa: F841
        obj["bar"] = "baz"
        obj["quux"] = "quuz"
        obj.update(
            {
                "bar": "foo",
                "quazi": "var",
            }
        )
        del obj["bar"]
        _ = obj["quux"]  # read something
        obj.clear()


@pytest.mark.timeout(timeout=0)
@pytest.mark.benchmark(
    group="dict_plain_vs_reactive",
)
@pytest.mark.parametrize("name", ["plain", "reactive", "reactive+watcher"])
def test_dict_plain_vs_reactive(benchmark, name):
    bench_fn = partial(bench_dict, name == "plain", name.endswith("+watcher"))
    benchmark(bench_fn)


def bench_list(plain, add_watcher):
    for _ in range(N):
        obj = [] if plain else reactive([])
        if add_watcher:
            watcher = watch(obj, callback=noop, deep=True)  # noqa: F841
        obj.append("bar")
        obj.extend(["quux", "quuz"])
        obj[1] = "foo"
        obj.pop(0)
        _ = obj[0]  # read something
        obj.clear()


@pytest.mark.timeout(timeout=0)
@pytest.mark.benchmark(
    group="list_plain_vs_reactive",
)
@pytest.mark.parametrize("name", ["plain", "reactive", "reactive+watcher"])
def test_list_plain_vs_reactive(benchmark, name):
    bench_fn = partial(bench_list, name == "plain", name.endswith("+watcher"))
    benchmark(bench_fn)


def bench_fan_out(n_effects):
    count = ref(0)
    runners = [effect(lambda: count.value) for _ in range(n_effects)]
    for i in range(1, 101):
        count.value = i
    for runner in runners:
        runner.stop()


@pytest.mark.timeout(timeout=0)
@pytest.mark.benchmark(
    group="trigger_fan_out",
)
@pytest.mark.parametrize("n_effects", [1, 100, 1000])
def test_trigger_fan_out(benchmark, n_effects):
    benchmark(partial(bench_fan_out, n_effects))


def bench_computed_chain(depth):
    count = ref(0)
    chain = [computed(lambda: count.value + 1)]
    for _ in range(depth):
        chain.append(computed(partial(lambda prev: prev.value + 1, chain[-1])))
    runner = effect(lambda: chain[-1].value)
    for i in range(1, 101):
        count.value = i
    runner.stop()
    for value in chain:
        value.stop()


@pytest.mark.timeout(timeout=0)
@pytest.mark.benchmark(
    group="computed_chain",
)
@pytest.mark.parametrize("depth", [1, 10, 100])
def test_computed_chain(benchmark, depth):
    benchmark(partial(bench_computed_chain, depth))
