import gc
import logging
import sys
import weakref
from weakref import WeakSet, WeakValueDictionary

from .dep import Dep

logger = logging.getLogger(__name__)


class _IterateKey:
    """Key under which whole-collection reads (len, iteration, ...) are tracked"""

    __slots__ = ()

    def __repr__(self):
        return "ITERATE_KEY"


ITERATE_KEY = _IterateKey()


class TargetMap:
    """
    Dependency store: maps observed targets to their keys and the Dep
    for each key. Targets are tracked by their id, together with the
    proxies that currently wrap them.

    Entries don't keep their targets alive. Targets that support weak
    references (refs, computed values, most plain objects) are held
    weakly and their entry is removed when they are collected. Other
    targets (dicts, lists) are held by the entry: it is removed when the
    last proxy for the target is destroyed and nothing else refers to
    the target, or by a garbage collector callback once the entry holds
    the last reference. Use `dispose` to remove an entry right away.
    """

    __slots__ = ("__weakref__", "db")

    def __init__(self):
        self.db = {}
        _target_maps.add(self)

    def __len__(self):
        return len(self.db)

    def __contains__(self, target):
        return id(target) in self.db

    def cleanup(self):
        """
        Removes the entries for targets that have no references
        outside of this map
        """
        keys_to_delete = []
        for key, value in self.db.items():
            if isinstance(value["target"], weakref.ref):
                continue
            # Refs:
            # - sys.getrefcount
            # - ref in db item
            if sys.getrefcount(value["target"]) <= 2:
                keys_to_delete.append(key)

        for key in keys_to_delete:
            del self.db[key]
        if keys_to_delete:
            logger.debug("Swept %d unreferenced targets", len(keys_to_delete))

    def entry(self, target, create=False):
        obj_id = id(target)
        entry = self.db.get(obj_id)
        if entry is None and create:
            entry = self.db[obj_id] = {
                "target": self._hold(target),
                "keydeps": {},
                # keyed on tuple(readonly, shallow)
                "proxies": WeakValueDictionary(),
            }
        return entry

    def _hold(self, target):
        if not type(target).__weakrefoffset__:
            return target

        obj_id = id(target)
        db = self.db

        def remove(weak_target):
            # the id might be in use by a new target already
            entry = db.get(obj_id)
            if entry is not None and entry["target"] is weak_target:
                del db[obj_id]

        return weakref.ref(target, remove)

    def get_dep(self, target, key, create=False):
        entry = self.entry(target, create=create)
        if entry is None:
            return None
        keydeps = entry["keydeps"]
        dep = keydeps.get(key)
        if dep is None and create:
            dep = keydeps[key] = Dep(key)
        return dep

    def dispose(self, target):
        """Removes all dependency data for the given target"""
        self.db.pop(id(target), None)

    def reference(self, proxy):
        """
        Adds a reference to the collection for the wrapped object's id
        """
        entry = self.entry(proxy.__target__, create=True)
        result = entry["proxies"].setdefault(
            (proxy.__readonly__, proxy.__shallow__), proxy
        )
        if result is not proxy:
            raise RuntimeError("Proxy with existing configuration already in db")

    def dereference(self, proxy):
        """
        Removes a reference from the database for the given proxy
        """
        obj_id = id(proxy.__target__)
        entry = self.db.get(obj_id)
        if entry is None:
            # The proxy might outlive the map it was registered in,
            # for instance after the context has been swapped out
            return

        if isinstance(entry["target"], weakref.ref):
            # removed by the weakref callback once the target is collected
            return

        if len(entry["proxies"]) <= 1:
            # Ref count is 4 here: the entry, the reference through
            # proxy.__target__, the local and sys.getrefcount.
            # A container that holds itself adds to that.
            target = proxy.__target__
            if sys.getrefcount(target) <= 4 + self_references(target):
                del self.db[obj_id]

    def get_proxy(self, target, readonly=False, shallow=False):
        """
        Returns a proxy from the collection for the given object and configuration.
        Will return None if there is no proxy for the object's id.
        """
        entry = self.db.get(id(target))
        if entry is None:
            return None
        return entry["proxies"].get((readonly, shallow))


def self_references(target):
    """Number of times a container holds itself directly"""
    if isinstance(target, dict):
        return sum(value is target for value in target.values())
    if isinstance(target, list):
        return sum(value is target for value in target)
    return 0


_target_maps = WeakSet()


def _collect(phase, info):
    if phase != "stop":
        return
    for target_map in list(_target_maps):
        target_map.cleanup()


gc.callbacks.append(_collect)
