from importlib.metadata import version

__version__ = version("reactivity")


from . import dict_proxy, list_proxy, object_proxy  # noqa: F401
from .computed import ComputedRef, computed
from .context import ReactivityContext, get_context, set_context, track, trigger
from .effect import ReactiveEffect, effect, register_subscriber, stop
from .init import init, loop_factory
from .proxy import (
    is_proxy,
    make_reactive,
    reactive,
    readonly,
    shallow_reactive,
    shallow_readonly,
    to_raw,
)
from .ref import Ref, is_ref, make_ref, ref, unref
from .scheduler import (
    QueueScheduler,
    Scheduler,
    SyncScheduler,
    scheduler,
    timer_scheduler,
)
from .target_map import ITERATE_KEY
from .traps import ReadonlyError
from .watcher import InvalidSourceError, Watcher, watch, watch_effect
