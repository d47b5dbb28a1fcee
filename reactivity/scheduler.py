"""
Schedulers decide when the rerun of a triggered effect (or a watch
callback) actually happens. The queue schedulers batch and deduplicate
jobs and should be integrated in the event loop of your choosing.
"""

import asyncio
import importlib
import logging
import warnings
from collections import defaultdict

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Strategy interface: receives a job (a callable without arguments)
    and decides whether, when and how to run it.
    """

    __slots__ = ("__weakref__",)

    def schedule(self, job):
        raise NotImplementedError

    def __call__(self, job):
        self.schedule(job)


class SyncScheduler(Scheduler):
    """Runs jobs right away"""

    __slots__ = ()

    def schedule(self, job):
        job()


class CallbackScheduler(Scheduler):
    """Adapts a plain function that accepts the job to the Scheduler interface"""

    __slots__ = ("callback",)

    def __init__(self, callback):
        self.callback = callback

    def schedule(self, job):
        self.callback(job)


class QueueScheduler(Scheduler):
    """
    Queues up jobs and runs them, in order of arrival, when flushed.
    A job that is already waiting in the queue is not queued again.

    `defer` determines how the flush is requested from an asyncio loop:
    "post" flushes with `call_soon`, right after the callbacks that are
    ready; "pre" flushes with a zero-delay timer.
    """

    __slots__ = (
        "_queue",
        "circular",
        "defer",
        "detect_cycles",
        "flushing",
        "has",
        "index",
        "request_flush",
        "timer",
        "waiting",
    )

    def __init__(self, defer="post"):
        self._queue = []
        self.defer = defer
        self.flushing = False
        self.has = set()
        self.circular = defaultdict(int)
        self.index = 0
        self.waiting = False
        self.request_flush = self.request_flush_raise
        self.detect_cycles = True
        self.timer = None

    def __len__(self):
        return len(self._queue) - self.index

    def request_flush_raise(self):
        """
        Error raising default request flusher.
        """
        raise ValueError("No flush request handler registered")

    def register_request_flush(self, callback):
        """
        Register callback for registering a call to flush
        """
        self.request_flush = callback

    def request_flush_asyncio(self):
        loop = get_event_loop()
        if self.defer == "pre":
            loop.call_later(0, self.flush)
        else:
            loop.call_soon(self.flush)

    def register_asyncio(self):
        """
        Utility function for integration with asyncio
        """
        self.register_request_flush(self.request_flush_asyncio)

    def register_qt(self):
        """
        Utility function for integration with the Qt event loop. The flush
        is requested with a zero-interval single shot timer which fires as
        soon as Qt is done processing events. Using `register_asyncio` with
        the `QtAsyncio.QAsyncioEventLoopPolicy` is preferred when available.
        """
        for qt in ("PySide6", "PyQt6", "PySide2", "PyQt5"):
            try:
                QtCore = importlib.import_module(f"{qt}.QtCore")  # noqa: N806
                break
            except ImportError:
                continue
        else:
            raise ImportError("Could not import QtCore")

        try:
            importlib.import_module(f"{qt}.QtAsyncio")

            warnings.warn(
                "QtAsyncio module available: please consider using `init('asyncio')` "
                "and call the following code:\n"
                f"    from {qt} import QtAsyncio\n"
                "    asyncio.set_event_loop_policy(\n"
                "        QtAsyncio.QAsyncioEventLoopPolicy()\n"
                "    )",
                stacklevel=2,
            )
        except ImportError:
            pass

        self.timer = QtCore.QTimer()
        self.timer.setSingleShot(True)
        self.timer.timeout.connect(self.flush)
        self.timer.setInterval(0)
        self.register_request_flush(self.timer.start)

    def schedule(self, job):
        if job in self.has:
            return

        self.has.add(job)
        self._queue.append(job)
        if not self.flushing and not self.waiting:
            self.waiting = True
            self.request_flush()

    def flush(self):
        """
        Flush the queue to run all queued jobs.
        You can call this manually, or register a callback
        to request to perform the flush.
        """
        if not self._queue:
            self.waiting = False
            return

        logger.debug("Flushing %d queued jobs", len(self._queue))
        self.flushing = True
        self.waiting = False
        try:
            # jobs queued while flushing end up at the back of the queue
            while self.index < len(self._queue):
                job = self._queue[self.index]
                self.has.discard(job)

                if self.detect_cycles:
                    self.circular[job] += 1
                    if self.circular[job] > 100:
                        raise RecursionError(
                            f"Infinite update loop detected in job {job_name(job)}"
                        )

                job()
                self.index += 1
        finally:
            self.clear()

    def clear(self):
        self._queue.clear()
        self.flushing = False
        self.waiting = False
        self.has.clear()
        self.circular.clear()
        self.index = 0


def job_name(job):
    fn = getattr(job, "__func__", job)
    return getattr(fn, "__qualname__", repr(job))


def get_event_loop():
    """
    Returns the running loop. Outside of a running loop, returns the
    current loop of this thread, which is created when there is none.
    """
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        pass
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        try:
            return asyncio.get_event_loop()
        except RuntimeError:
            pass
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


FLUSH_MODES = ("sync", "pre", "post")

# Construct global instances
sync_scheduler = SyncScheduler()
scheduler = QueueScheduler(defer="post")
timer_scheduler = QueueScheduler(defer="pre")


def scheduler_for(flush):
    """Returns the scheduler that implements the given flush timing"""
    if flush == "sync":
        return sync_scheduler
    if flush == "post":
        return scheduler
    if flush == "pre":
        return timer_scheduler
    raise ValueError(f"Unknown flush timing {flush!r}, expected one of {FLUSH_MODES}")
