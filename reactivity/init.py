import asyncio

from .scheduler import scheduler, timer_scheduler


def init(mode="asyncio"):
    """
    Registers the event loop integration that flushes the
    queues of the "post" and "pre" flush timings.
    """
    if mode == "qt":
        scheduler.register_qt()
        timer_scheduler.register_qt()
    elif mode == "asyncio":
        scheduler.register_asyncio()
        timer_scheduler.register_asyncio()
    else:
        raise ValueError(f"Unknown mode {mode!r}, expected 'asyncio' or 'qt'")


def loop_factory():
    loop = asyncio.new_event_loop()
    if hasattr(asyncio, "eager_task_factory"):
        loop.set_task_factory(asyncio.eager_task_factory)
    return loop
