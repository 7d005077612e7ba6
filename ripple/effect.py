"""
Effects perform dependency tracking via functions acting on
observable datastructures and refs, and run the function again
as soon as one of the dependencies changes.
"""

from __future__ import annotations

import logging
from itertools import count
from typing import Callable, ClassVar, Generic, TypeVar

from .dep import Dep

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Every Effect gets a unique ID, mostly useful for debugging
_ids = count()


class Effect(Generic[T]):
    __slots__ = (
        "__weakref__",
        "_deps",
        "_depth",
        "_new_deps",
        "active",
        "fn",
        "id",
    )
    __skip_proxy__ = True
    # Raise a RecursionError when an effect is re-entered through
    # its own updates more often than max_recursion times
    detect_cycles: ClassVar[bool] = True
    max_recursion: ClassVar[int] = 32

    def __init__(self, fn: Callable[[], T]) -> None:
        self.id = next(_ids)
        self.fn = fn
        self.active = True
        # dicts are used as ordered sets of Dep objects
        self._deps = {}
        self._new_deps = None
        self._depth = 0

    def __repr__(self) -> str:
        state = "active" if self.active else "stopped"
        return f"<{type(self).__name__} {self.id} {self.fn_fqn} ({state})>"

    def run(self) -> T | None:
        """
        Runs the function while tracking its dependencies. Does nothing
        (and returns None) once the effect has been stopped.
        """
        if not self.active:
            return None

        # A run can be nested in another run of the same effect,
        # so every run collects its own set of deps
        outer_deps, self._new_deps = self._new_deps, {}
        Dep.stack.append(self)
        try:
            return self.fn()
        finally:
            Dep.stack.pop()
            self.cleanup_deps()
            self._new_deps = outer_deps

    def update(self) -> None:
        """Called when one of the dependencies has changed"""
        if not self.active:
            return

        self._depth += 1
        try:
            if self.detect_cycles and self._depth > self.max_recursion:
                raise RecursionError(
                    f"Infinite update loop detected in effect {self.fn_fqn}"
                )
            self.run()
        finally:
            self._depth -= 1

    def stop(self) -> None:
        """
        Deactivates the effect for good and removes it from all deps.
        Stopping an effect that is already stopped does nothing.
        """
        if not self.active:
            return
        self.active = False
        for dep in self._deps:
            dep.remove_sub(self)
        self._deps = {}
        logger.debug("Stopped effect %s", self.fn_fqn)

    def add_dep(self, dep: Dep) -> None:
        if dep not in self._new_deps:
            self._new_deps[dep] = None
            dep.add_sub(self)

    def cleanup_deps(self) -> None:
        new_deps = self._new_deps
        for dep in self._deps:
            if dep not in new_deps:
                dep.remove_sub(self)

        if self.active:
            # a nested run of this effect might have unsubscribed
            # from deps that this run still depends on
            for dep in new_deps:
                dep.add_sub(self)
        else:
            # stopped while running
            for dep in new_deps:
                dep.remove_sub(self)
            new_deps = {}
        self._deps = new_deps

    @property
    def fn_fqn(self) -> str:
        module = getattr(self.fn, "__module__", None)
        name = getattr(self.fn, "__qualname__", None) or repr(self.fn)
        return f"{module}.{name}" if module else name


def effect(fn: Callable[[], T]) -> Effect[T]:
    """
    Runs fn right away and again whenever the reactive state it
    read during its last run changes. Returns the Effect, call
    `stop()` on it to dispose of it.
    """
    runner = Effect(fn)
    runner.run()
    return runner
