from operator import index as as_index

from .object_utils import clamp_index, normalize_index
from .proxy import TYPE_LOOKUP, Proxy, has_changed, is_wrappable, proxy
from .proxy_db import LENGTH, proxy_db
from .traps import construct_methods_traps_dict, trap_map

list_traps = {
    "READERS": {
        "count",
        "index",
        "copy",
        "__add__",
        "__contains__",
        "__eq__",
        "__ge__",
        "__gt__",
        "__le__",
        "__lt__",
        "__mul__",
        "__ne__",
        "__rmul__",
        "__repr__",
        "__str__",
        "__format__",
        "__sizeof__",
        "__iter__",
        "__reversed__",
    },
    "SIZEREADERS": {
        "__len__",
    },
    "KEYREADERS": {
        "__getitem__",
    },
}


class ListProxyBase(Proxy[list]):
    """
    Base for list proxies: implements the tracking hooks for the reading
    traps and every method that mutates the list.

    Structural mutations notify the subscribers of the length and of
    every index from the first position that could have changed.
    Positions before that are left alone.
    """

    def __normalize__(self):
        target = self.__target__
        for i, value in enumerate(target):
            if not isinstance(value, Proxy) and is_wrappable(value):
                target[i] = proxy(value)

    def __track_all__(self):
        proxy_db.track(self, LENGTH)
        for i in range(len(self.__target__)):
            proxy_db.track(self, i)

    def __track_size__(self):
        proxy_db.track(self, LENGTH)

    def __track_key__(self, key):
        length = len(self.__target__)
        if isinstance(key, slice):
            proxy_db.track(self, LENGTH)
            for i in range(*key.indices(length)):
                proxy_db.track(self, i)
            return

        try:
            key = as_index(key)
        except TypeError:
            # not an index: the list itself will raise
            return
        if key < 0:
            # what a negative index points to shifts with the length
            proxy_db.track(self, LENGTH)
        position = normalize_index(key, length)
        if position is not None:
            proxy_db.track(self, position)

    # length-and-index mutations

    def append(self, value):
        target = self.__target__
        start = len(target)
        target.append(proxy(value))
        proxy_db.trigger_sequence(self, start)

    def extend(self, values):
        values = [proxy(value) for value in values]
        if not values:
            return
        target = self.__target__
        start = len(target)
        target.extend(values)
        proxy_db.trigger_sequence(self, start)

    def __iadd__(self, values):
        self.extend(values)
        return self

    def __imul__(self, n):
        target = self.__target__
        length = len(target)
        n = as_index(n)
        target *= n
        if length and n != 1:
            proxy_db.trigger_sequence(self, length if n > 1 else 0)
        return self

    def insert(self, index, value):
        target = self.__target__
        start = clamp_index(as_index(index), len(target))
        target.insert(start, proxy(value))
        proxy_db.trigger_sequence(self, start)

    def pop(self, index=-1):
        target = self.__target__
        length = len(target)
        value = target.pop(index)
        # pop() without index vacates the last position
        proxy_db.trigger_sequence(self, normalize_index(as_index(index), length))
        return value

    def remove(self, value):
        target = self.__target__
        start = target.index(value)
        del target[start]
        proxy_db.trigger_sequence(self, start)

    def clear(self):
        target = self.__target__
        if not target:
            return
        target.clear()
        proxy_db.trigger_sequence(self, 0)

    def __delitem__(self, key):
        target = self.__target__
        length = len(target)
        if isinstance(key, slice):
            positions = range(*key.indices(length))
            if not positions:
                return
            start = min(positions)
        else:
            start = normalize_index(as_index(key), length)
        del target[key]
        proxy_db.trigger_sequence(self, start)

    def __setitem__(self, key, value):
        target = self.__target__
        length = len(target)
        if isinstance(key, slice):
            values = [proxy(item) for item in value]
            positions = range(*key.indices(length))
            target[key] = values
            if not positions and not values:
                return
            if key.step is None or key.step == 1:
                # works like a splice: might change the length
                proxy_db.trigger_sequence(self, positions.start)
            elif positions:
                proxy_db.trigger_sequence(self, min(positions), length=False)
            return

        position = normalize_index(as_index(key), length)
        if position is None or position >= length:
            # let the list raise the IndexError
            target[key] = value
        value = proxy(value)
        if not has_changed(target[position], value):
            return
        target[position] = value
        proxy_db.trigger(self, position)

    # partial-index mutations, the length stays the same

    def fill(self, value, start=0, end=None):
        """
        Fills the positions from start up to (not including) end with
        value. Negative positions count from the end of the list.
        Returns the proxy.
        """
        target = self.__target__
        length = len(target)
        start = clamp_index(as_index(start), length)
        end = length if end is None else clamp_index(as_index(end), length)
        if start >= end:
            return self
        value = proxy(value)
        for i in range(start, end):
            target[i] = value
        proxy_db.trigger_sequence(self, start, length=False)
        return self

    def copy_within(self, dest, start=0, end=None):
        """
        Copies the items from start up to (not including) end to the
        positions from dest onwards, without changing the length.
        Negative positions count from the end of the list.
        Returns the proxy.
        """
        target = self.__target__
        length = len(target)
        dest = clamp_index(as_index(dest), length)
        start = clamp_index(as_index(start), length)
        end = length if end is None else clamp_index(as_index(end), length)
        count = min(end - start, length - dest)
        if count <= 0:
            return self
        target[dest : dest + count] = target[start : start + count]
        proxy_db.trigger_sequence(self, dest, length=False)
        return self

    # full-index mutations

    def reverse(self):
        self.__target__.reverse()
        proxy_db.trigger_sequence(self, 0, length=False)

    def sort(self, *, key=None, reverse=False):
        self.__target__.sort(key=key, reverse=reverse)
        proxy_db.trigger_sequence(self, 0, length=False)


ListProxy = type(
    "ListProxy",
    (ListProxyBase,),
    construct_methods_traps_dict(list, list_traps, trap_map),
)


def type_test(target):
    return isinstance(target, list)


TYPE_LOOKUP[type_test] = ListProxy
