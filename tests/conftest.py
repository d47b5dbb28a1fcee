import gc

import pytest

from reactivity import ReactivityContext, scheduler, set_context, timer_scheduler
from reactivity.store import clear_stores


def noop():
    pass


@pytest.fixture
def noop_request_flush():
    old_callbacks = scheduler.request_flush, timer_scheduler.request_flush
    scheduler.register_request_flush(noop)
    timer_scheduler.register_request_flush(noop)
    try:
        yield
    finally:
        scheduler.register_request_flush(old_callbacks[0])
        timer_scheduler.register_request_flush(old_callbacks[1])


@pytest.fixture(autouse=True)
def clear():
    try:
        yield
    finally:
        scheduler.clear()
        timer_scheduler.clear()
        clear_stores()


@pytest.fixture(autouse=True)
def context():
    # Every test gets its own dependency store and effect stack,
    # so that effects of earlier tests can't leak into later ones
    gc.collect()
    context = ReactivityContext()
    previous = set_context(context)
    try:
        yield context
    finally:
        set_context(previous)
