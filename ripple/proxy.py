from __future__ import annotations

from typing import Generic, TypeVar, cast

from .proxy_db import proxy_db

T = TypeVar("T")


class Proxy(Generic[T]):
    """
    Proxy for an object/target.

    Instantiating a Proxy will add a reference to the global proxy_db and
    destroying a Proxy will remove that reference.

    Please use the `proxy` method to get a proxy for a certain object instead
    of directly creating one yourself. The `proxy` method will either create
    or return an existing proxy and makes sure that the db stays consistent.
    """

    __hash__ = None
    # the slots have to be very unique since we also proxy objects
    # which may define the attributes with the same names
    __slots__ = ("__target__", "__weakref__")

    def __init__(self, target: T):
        self.__target__ = target
        proxy_db.reference(self)
        # Register first, normalize afterwards: a target that (indirectly)
        # contains itself will find this proxy in the db
        self.__normalize__()

    def __del__(self):
        proxy_db.dereference(self)

    def __normalize__(self):
        """Replace all wrappable values of the target by their proxies"""
        raise NotImplementedError


# Lookup dict for mapping a type (dict, list, object) to the proxy
# type that will convert an object of that type to a proxied version
TYPE_LOOKUP = {}


def is_wrappable(value) -> bool:
    """Returns whether the value is a structured value that can be proxied"""
    if isinstance(value, Proxy):
        return True
    return any(type_test(value) for type_test in TYPE_LOOKUP)


def is_reactive(value) -> bool:
    return isinstance(value, Proxy)


def has_changed(old, new) -> bool:
    """
    Compares the currently stored value with the incoming one.
    Structured (wrappable) values only compare by identity, plain values
    fall back to equality so that equal numbers and strings that happen
    to be different objects are not reported as a change.
    """
    if old is new:
        return False
    if is_wrappable(old) or is_wrappable(new):
        return True
    if type(old) is not type(new):
        return True
    return bool(old != new)


def proxy(target: T) -> T:
    """
    Returns a Proxy for the given object. If a proxy for the given
    object already exists, it will return that instead of
    creating a new one.

    Please be aware: this only works on dicts, lists and instances
    of user defined classes! Any other value is returned as-is.
    """
    # Proxying a proxy is a no-op
    if isinstance(target, Proxy):
        return target

    # Check the proxy_db to see if there's already a proxy for the target object
    existing_proxy = proxy_db.get_proxy(target)
    if existing_proxy is not None:
        return existing_proxy

    # Create a new proxy
    for type_test, proxy_type in TYPE_LOOKUP.items():
        if type_test(target):
            return proxy_type(target)

    # We can't proxy a plain value
    return target


reactive = proxy


def to_raw(target: Proxy[T] | T) -> T:
    """
    Returns a raw object from which any trace of proxy has been replaced
    with its wrapped target value.
    """
    if isinstance(target, Proxy):
        return to_raw(target.__target__)

    if isinstance(target, list):
        return cast(T, [to_raw(t) for t in target])

    if isinstance(target, dict):
        return cast(T, {key: to_raw(value) for key, value in target.items()})

    if isinstance(target, tuple):
        return cast(T, tuple(to_raw(t) for t in target))

    return target
