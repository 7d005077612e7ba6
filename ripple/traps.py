"""
Trap factories for the reading side of the collection proxies.

Every trap tracks what it observes through one of the tracking hooks of
the proxy class (`__track_all__`, `__track_size__` or `__track_key__`)
before calling the original method on the target.
"""

from functools import wraps

from .dep import Dep
from .proxy import Proxy


def unwrap_args(args):
    return tuple(arg.__target__ if isinstance(arg, Proxy) else arg for arg in args)


def read_trap(method, obj_cls):
    """Trap for methods that observe every key and the size"""
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        if Dep.stack:
            self.__track_all__()
        return fn(self.__target__, *unwrap_args(args), **kwargs)

    return trap


def size_trap(method, obj_cls):
    """Trap for methods that only observe the size (or key set)"""
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        if Dep.stack:
            self.__track_size__()
        return fn(self.__target__, *args, **kwargs)

    return trap


def read_key_trap(method, obj_cls):
    """Trap for methods that observe a single key"""
    fn = getattr(obj_cls, method)

    @wraps(fn)
    def trap(self, *args, **kwargs):
        if Dep.stack:
            self.__track_key__(args[0])
        return fn(self.__target__, *args, **kwargs)

    return trap


trap_map = {
    "READERS": read_trap,
    "SIZEREADERS": size_trap,
    "KEYREADERS": read_key_trap,
}


def construct_methods_traps_dict(obj_cls, traps, trap_map):
    return {
        method: trap_map[trap_type](method, obj_cls)
        for trap_type, methods in traps.items()
        for method in methods
    }
