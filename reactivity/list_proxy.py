"""
Lists are observed as a whole: every read subscribes to the list's
ITERATE_KEY and every change to the list notifies it.
"""

from .proxy import Proxy
from .traps import define_proxy_types

list_traps = {
    "READERS": {
        "count",
        "index",
        "copy",
        "__add__",
        "__contains__",
        "__eq__",
        "__format__",
        "__getitem__",
        "__len__",
        "__mul__",
        "__ne__",
        "__repr__",
        "__rmul__",
        "__str__",
    },
    "ITERATORS": {
        "__iter__",
        "__reversed__",
    },
    "WRITERS": {
        "append",
        "clear",
        "extend",
        "insert",
        "pop",
        "remove",
        "reverse",
        "sort",
        "__delitem__",
        "__iadd__",
        "__imul__",
        "__setitem__",
    },
}


class ListProxyBase(Proxy[list]):
    pass


ListProxy, ReadonlyListProxy = define_proxy_types(
    "ListProxy", ListProxyBase, list, list_traps
)
