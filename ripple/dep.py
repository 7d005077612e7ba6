"""
Deps implement the classic observable pattern, and
are attached to observable datastructures and refs.
"""

from __future__ import annotations

from typing import ClassVar, Iterable


class Dep:
    __slots__ = ("__weakref__", "_subs")
    # The effect on top of the stack is the one that is currently running
    # and will be recorded as subscriber of every dep that is read.
    # A None on top pauses tracking (e.g. while running watch callbacks)
    stack: ClassVar[list["Effect"]] = []  # noqa: F821

    def __init__(self) -> None:
        # dict instead of set: keeps subscribers in insertion order
        self._subs: dict["Effect", None] = None  # noqa: F821

    def __len__(self) -> int:
        return len(self._subs) if self._subs else 0

    def __contains__(self, sub) -> bool:
        return bool(self._subs) and sub in self._subs

    def add_sub(self, sub: "Effect") -> None:  # noqa: F821
        if self._subs is None:
            self._subs = {}
        self._subs[sub] = None

    def remove_sub(self, sub: "Effect") -> None:  # noqa: F821
        if self._subs:
            self._subs.pop(sub, None)

    @classmethod
    def tracking(cls) -> bool:
        return bool(cls.stack) and cls.stack[-1] is not None

    def depend(self) -> None:
        if self.tracking():
            self.stack[-1].add_dep(self)

    def notify(self) -> None:
        if self._subs:
            # iterate over a snapshot: subscribers will re-subscribe
            # (or unsubscribe) while they are being updated
            _update(list(self._subs))

    @staticmethod
    def notify_all(deps: Iterable[Dep]) -> None:
        """
        Notify the subscribers of all given deps, but every subscriber
        only once, in the order in which they are first encountered.
        """
        subs = {}
        for dep in deps:
            if dep._subs:
                subs.update(dep._subs)
        if subs:
            _update(list(subs))


def _update(subs):
    active = Dep.stack[-1] if Dep.stack else None
    for sub in subs:
        # a computation that writes to something it has just read
        # should not trigger itself
        if sub is active:
            continue
        sub.update()
