from .dep import Dep
from .proxy import TYPE_LOOKUP, Proxy, has_changed, is_wrappable, proxy
from .proxy_db import proxy_db
from .traps import construct_methods_traps_dict, trap_map

dict_traps = {
    "READERS": {
        "copy",
        "values",
        "items",
        "__eq__",
        "__format__",
        "__ge__",
        "__gt__",
        "__le__",
        "__lt__",
        "__ne__",
        "__repr__",
        "__sizeof__",
        "__str__",
        "__or__",
        "__ror__",
    },
    "SIZEREADERS": {
        "keys",
        "__iter__",
        "__len__",
        "__reversed__",
    },
    "KEYREADERS": {
        "get",
        "__contains__",
        "__getitem__",
    },
}


class DictProxyBase(Proxy[dict]):
    def __normalize__(self):
        target = self.__target__
        for key, value in list(target.items()):
            if not isinstance(value, Proxy) and is_wrappable(value):
                target[key] = proxy(value)

    def __track_all__(self):
        proxy_db.track_iterate(self)
        for key in self.__target__:
            proxy_db.track(self, key)

    def __track_size__(self):
        proxy_db.track_iterate(self)

    def __track_key__(self, key):
        proxy_db.track(self, key)

    def __setitem__(self, key, value):
        target = self.__target__
        value = proxy(value)
        is_new = key not in target
        if not is_new and not has_changed(target[key], value):
            return
        target[key] = value
        proxy_db.trigger(self, key)
        if is_new:
            proxy_db.trigger_iterate(self)

    def setdefault(self, key, default=None):
        if key not in self.__target__:
            self[key] = default
        return self[key]

    def update(self, *args, **kwargs):
        args = tuple(
            arg.__target__ if isinstance(arg, Proxy) else arg for arg in args
        )
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def __ior__(self, other):
        self.update(other)
        return self

    def __delitem__(self, key):
        del self.__target__[key]
        proxy_db.trigger(self, key, discard=True)
        proxy_db.trigger_iterate(self)

    def pop(self, key, *default):
        target = self.__target__
        if key not in target:
            return target.pop(key, *default)
        value = target.pop(key)
        proxy_db.trigger(self, key, discard=True)
        proxy_db.trigger_iterate(self)
        return value

    def popitem(self):
        key, value = self.__target__.popitem()
        proxy_db.trigger(self, key, discard=True)
        proxy_db.trigger_iterate(self)
        return key, value

    def clear(self):
        target = self.__target__
        if not target:
            return
        keys = list(target)
        target.clear()
        attrs = proxy_db.attrs(self)
        deps = [attrs["keydep"].pop(key) for key in keys if key in attrs["keydep"]]
        deps.append(attrs["dep"])
        Dep.notify_all(deps)


DictProxy = type(
    "DictProxy",
    (DictProxyBase,),
    construct_methods_traps_dict(dict, dict_traps, trap_map),
)


def type_test(target):
    return isinstance(target, dict)


TYPE_LOOKUP[type_test] = DictProxy
