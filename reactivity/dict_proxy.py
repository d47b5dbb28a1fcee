"""
Dicts are observed per key: key reads subscribe to that key, reads of
the whole dict (len, iteration, repr, ...) subscribe to ITERATE_KEY.
"""

from .proxy import Proxy
from .traps import define_proxy_types

dict_traps = {
    "READERS": {
        "copy",
        "keys",
        "__eq__",
        "__ne__",
        "__format__",
        "__len__",
        "__or__",
        "__ror__",
        "__repr__",
        "__sizeof__",
        "__str__",
    },
    "KEYREADERS": {
        "get",
        "__contains__",
        "__getitem__",
    },
    "ITERATORS": {
        "items",
        "values",
        "__iter__",
        "__reversed__",
    },
    "WRITERS": {
        "update",
        "__ior__",
    },
    "KEYWRITERS": {
        "setdefault",
        "__setitem__",
    },
    "DELETERS": {
        "clear",
        "popitem",
    },
    "KEYDELETERS": {
        "pop",
        "__delitem__",
    },
}


class DictProxyBase(Proxy[dict]):
    pass


DictProxy, ReadonlyDictProxy = define_proxy_types(
    "DictProxy", DictProxyBase, dict, dict_traps
)
