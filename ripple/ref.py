"""
Refs are single reactive values. Reading `ref.value` inside an effect
subscribes the effect, assigning a new value notifies the subscribers.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from .dep import Dep
from .proxy import has_changed, proxy

T = TypeVar("T")


class Ref(Generic[T]):
    __slots__ = ("__weakref__", "_dep", "_value")
    __skip_proxy__ = True

    def __init__(self, value: T = None) -> None:
        self._dep = Dep()
        self._value = proxy(value)

    @property
    def value(self) -> T:
        self._dep.depend()
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        value = proxy(value)
        if not has_changed(self._value, value):
            return
        self._value = value
        self._dep.notify()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


def is_ref(value) -> bool:
    return isinstance(value, Ref)


def ref(value: T = None) -> Ref[T]:
    """
    Returns a new Ref for the given value. When value already is a ref,
    it is returned as-is instead of wrapping a ref in another ref.
    """
    if is_ref(value):
        return value
    return Ref(value)


def unref(value):
    """Returns the value of a ref, or the given value when it is not a ref"""
    return value.value if is_ref(value) else value
