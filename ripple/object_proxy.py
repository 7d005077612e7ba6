import sys
from enum import Enum
from inspect import getattr_static
from types import FunctionType

from .object_utils import get_object_attrs
from .proxy import TYPE_LOOKUP, Proxy, has_changed, is_wrappable, proxy
from .proxy_db import proxy_db

# names that belong to the proxy itself instead of the target
PROXY_ATTRS = frozenset({"__target__", "__weakref__", "__normalize__"})

_missing = object()


class ObjectProxyBase(Proxy):
    """
    Proxy for instances of user defined classes. Reads and writes of the
    stateful attributes (entries in __dict__ and __slots__) are tracked.
    Methods and properties are bound to the proxy instead of the target,
    so the object's own code also goes through the proxy.
    """

    def __normalize__(self):
        target = self.__target__
        for name in get_object_attrs(target):
            value = getattr(target, name, _missing)
            if value is _missing or isinstance(value, Proxy):
                continue
            if is_wrappable(value):
                # bypass __setattr__ overrides and frozen dataclasses
                object.__setattr__(target, name, proxy(value))

    def __getattribute__(self, name):
        if name in PROXY_ATTRS:
            return super().__getattribute__(name)

        target = self.__target__
        if name in get_object_attrs(target):
            proxy_db.track(self, name)
            return getattr(target, name)

        descriptor = getattr_static(type(target), name, None)
        if isinstance(descriptor, (FunctionType, property)):
            return descriptor.__get__(self, type(target))
        return getattr(target, name)

    def __setattr__(self, name, value):
        if name in PROXY_ATTRS:
            return super().__setattr__(name, value)

        target = self.__target__
        descriptor = getattr_static(type(target), name, None)
        if isinstance(descriptor, property):
            # run the setter against the proxy
            return descriptor.__set__(self, value)

        value = proxy(value)
        is_new = name not in get_object_attrs(target)
        old_value = _missing if is_new else getattr(target, name, _missing)
        if old_value is not _missing and not has_changed(old_value, value):
            return

        setattr(target, name, value)

        if is_new and name not in get_object_attrs(target):
            # the set attr is not stateful (e.g. someone
            # is attaching something to the class)
            # so no need to track this modification
            return
        proxy_db.trigger(self, name)

    def __delattr__(self, name):
        if name in PROXY_ATTRS:
            return super().__delattr__(name)

        target = self.__target__
        is_target_attr = name in get_object_attrs(target)
        delattr(target, name)
        if is_target_attr:
            proxy_db.trigger(self, name, discard=True)


def passthrough(method, binary=False):
    def trap(self, *args, **kwargs):
        target = self.__target__
        fn = getattr_static(type(target), method, None)
        if isinstance(fn, FunctionType):
            # defined in Python: run it against the proxy so that
            # the attributes it reads are tracked
            return fn(self, *args, **kwargs)
        fn = getattr(target, method, None)
        if fn is None:
            if binary:
                return NotImplemented
            # we don't cache this
            # since it is possible a class is dynamically modified later
            # invalidating the cached result...
            raise TypeError(
                f"object of type '{type(target).__name__}' has no {method}"
            )
        return fn(*args, **kwargs)

    trap.__name__ = method
    return trap


def bool_trap(self):
    target = self.__target__
    cls = type(target)
    if hasattr(cls, "__bool__"):
        return passthrough("__bool__")(self)
    if hasattr(cls, "__len__"):
        return len(self) != 0
    return True


magic_methods = [
    "__abs__",
    "__bytes__",
    "__call__",
    "__complex__",
    "__contains__",
    "__delitem__",
    "__enter__",
    "__exit__",
    "__float__",
    "__format__",
    "__getitem__",
    "__hash__",
    "__index__",
    "__int__",
    "__invert__",
    "__iter__",
    "__len__",
    "__neg__",
    "__next__",
    "__pos__",
    "__repr__",
    "__reversed__",
    "__round__",
    "__setitem__",
    "__str__",
]

binary_methods = [
    "__add__",
    "__and__",
    "__eq__",
    "__floordiv__",
    "__ge__",
    "__gt__",
    "__iadd__",
    "__iand__",
    "__ifloordiv__",
    "__imod__",
    "__imul__",
    "__ior__",
    "__isub__",
    "__itruediv__",
    "__ixor__",
    "__le__",
    "__lt__",
    "__matmul__",
    "__mod__",
    "__mul__",
    "__ne__",
    "__or__",
    "__pow__",
    "__radd__",
    "__rand__",
    "__rfloordiv__",
    "__rmod__",
    "__rmul__",
    "__ror__",
    "__rpow__",
    "__rsub__",
    "__rtruediv__",
    "__rxor__",
    "__sub__",
    "__truediv__",
    "__xor__",
]


ObjectProxy = type(
    "ObjectProxy",
    (ObjectProxyBase,),
    {
        **{method: passthrough(method) for method in magic_methods},
        **{method: passthrough(method, binary=True) for method in binary_methods},
        "__bool__": bool_trap,
    },
)


def type_test(target):
    # exclude builtin and standard library objects
    # exclude objects for which we have better proxies available
    # exclude ndarrays
    if isinstance(target, (list, set, frozenset, dict, tuple, Enum, Proxy)):
        return False
    cls = type(target)
    if getattr(cls, "__skip_proxy__", False):
        return False
    module = cls.__module__.partition(".")[0]
    return module not in sys.stdlib_module_names and module not in (
        "builtins",
        "numpy",
    )


TYPE_LOOKUP[type_test] = ObjectProxy
