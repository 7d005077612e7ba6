"""
watchers perform dependency tracking via functions acting on
observable datastructures and refs, and trigger a callback when
a change is detected.
"""

from __future__ import annotations

import inspect
import warnings
from functools import partial, wraps
from typing import Any, Callable, TypeVar, Union

from .dep import Dep
from .dict_proxy import DictProxyBase
from .effect import Effect
from .list_proxy import ListProxyBase
from .object_proxy import ObjectProxyBase
from .object_utils import get_object_attrs
from .proxy import Proxy
from .ref import Ref

T = TypeVar("T")
Watchable = Union[
    Callable[[], T],
    Ref[T],
    T,
]
WatchCallback = Union[Callable[[], Any], Callable[[T], Any], Callable[[T, T], Any]]


def watch(
    source: Watchable[T],
    callback: WatchCallback[T] | None = None,
    immediate: bool = False,
    deep: bool = False,
) -> Watcher[T]:
    """
    Watches the source and calls callback with the new and the old value
    every time the source changes. The source can be a ref, a function
    without arguments, a reactive object (which is watched deeply) or a
    list or tuple of those.

    Returns the watcher: call it (or its `stop` method) to stop watching.
    """
    fn = _getter(source)
    if fn is None:
        warnings.warn(
            "Watching a value that is not reactive and will never change: "
            f"{source!r}",
            stacklevel=2,
        )
        fn = partial(_constant, source)
    return Watcher(fn, callback, deep=deep, immediate=immediate)


watch_effect = partial(watch, callback=None)


def _constant(value):
    return value


def _getter(source):
    if isinstance(source, Ref):
        return lambda: source.value
    if isinstance(source, Proxy):
        return lambda: traverse(source)
    if isinstance(source, (list, tuple)):
        getters = [_getter(item) for item in source]
        if any(getter is None for getter in getters):
            return None
        return lambda: tuple(getter() for getter in getters)
    if callable(source):
        return source
    return None


def traverse(obj, seen=None):
    """
    Recursively traverse the whole tree to make sure
    that all values have been 'get'. Returns obj.
    """
    # we are only interested in traversing a fixed set of types
    # otherwise we can just exit
    if isinstance(obj, DictProxyBase):
        val_iter = iter(obj.values())
    elif isinstance(obj, (ListProxyBase, list, tuple)):
        val_iter = iter(obj)
    elif isinstance(obj, ObjectProxyBase):
        val_iter = (getattr(obj, attr) for attr in get_object_attrs(obj.__target__))
    else:
        return obj

    # track which objects we have already seen to support(!) full traversal
    # of datastructures with cycles
    if seen is None:
        seen = set()
    seen.add(id(obj))
    for v in val_iter:
        if id(v) not in seen:
            traverse(v, seen=seen)
    return obj


class WrongNumberOfArgumentsError(TypeError):
    """
    Error that is used to signal that the wrong number of arguments is
    used for the callback
    """

    pass


class Watcher(Effect[T]):
    __slots__ = (
        "_number_of_callback_args",
        "callback",
        "deep",
        "value",
    )

    def __init__(
        self,
        fn: Callable[[], T],
        callback: WatchCallback[T] | None = None,
        deep: bool = False,
        immediate: bool = False,
    ) -> None:
        """
        callback: Method to call when value has changed
        deep: Deep watch the watched value
        immediate: Call the callback right away with the current value
        """
        if deep:
            fn = _deep(fn)
        super().__init__(fn)
        self.callback = callback
        self.deep = deep
        self._number_of_callback_args = None
        try:
            self.value = super().run()
        except Exception:
            # nobody gets hold of this watcher, so it can never be stopped
            self.stop()
            raise
        if immediate and self.callback:
            self.run_callback(self.value, None)

    def __call__(self) -> None:
        self.stop()

    def run(self) -> T | None:
        """Called on every change of the watched value"""
        if not self.active:
            return None
        value = super().run()
        if not self.active:
            # stopped while evaluating
            return None
        old_value, self.value = self.value, value
        if self.callback:
            self.run_callback(value, old_value)
        return value

    def run_callback(self, new, old) -> None:
        """
        Runs the callback with dependency tracking paused: reactive state
        read by the callback never subscribes the watcher, nor any effect
        whose write triggered the watcher.
        """
        Dep.stack.append(None)
        try:
            self._dispatch_callback(new, old)
        finally:
            Dep.stack.pop()

    def _dispatch_callback(self, new, old) -> None:
        """
        When the number of arguments is still unknown
        for the callback, it will fall into the try/except construct
        to figure out the right number of arguments.
        After running the callback one time, the number of arguments
        is known and the callback can be called with the correct
        amount of arguments.
        """
        if self._number_of_callback_args == 1:
            self.callback(new)
        elif self._number_of_callback_args == 2:
            self.callback(new, old)
        elif self._number_of_callback_args == 0:
            self.callback()
        else:
            try:
                self._run_callback(new, old)
                self._number_of_callback_args = 2
            except WrongNumberOfArgumentsError:
                try:
                    self._run_callback(new)
                    self._number_of_callback_args = 1
                except WrongNumberOfArgumentsError:
                    self._run_callback()
                    self._number_of_callback_args = 0

    def _run_callback(self, *args) -> None:
        """
        Run the callback with the given arguments. When the callback
        raises a TypeError, check to see if the error results from
        within the callback or from calling the callback with the
        wrong number of arguments.
        Raises WrongNumberOfArgumentsError if callback was called
        with the wrong number of arguments.
        """
        try:
            return self.callback(*args)
        except TypeError as e:
            frames = inspect.trace()
            try:
                if len(frames) != 1:
                    raise
                raise WrongNumberOfArgumentsError(str(e)) from e
            finally:
                del frames


def _deep(fn):
    @wraps(fn)
    def deep_fn():
        return traverse(fn())

    return deep_fn
