from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from .effect import Effect
from .ref import Ref

T = TypeVar("T")


class ComputedRef(Ref[T]):
    """
    Read-only ref that holds the result of a function. The function is
    evaluated right away and again every time one of its dependencies
    changes. Subscribers of the computed ref are only notified when the
    result actually changed.
    """

    __slots__ = ("effect",)

    def __init__(self, fn: Callable[[], T]) -> None:
        super().__init__()

        @wraps(fn)
        def evaluate():
            Ref.value.fset(self, fn())

        self.effect = Effect(evaluate)
        self.effect.run()

    @property
    def value(self) -> T:
        return Ref.value.fget(self)

    def stop(self) -> None:
        """Stops updating, the last computed value stays available"""
        self.effect.stop()


def computed(fn: Callable[[], T]) -> ComputedRef[T]:
    """
    Create a computed ref for the given function, also usable
    as decorator. Note: make sure fn doesn't need any arguments
    to run and doesn't change reactive state
    """
    return ComputedRef(fn)
