from functools import cache
from itertools import chain


@cache
def get_class_slots(cls):
    """utility to collect all __slots__ entries for a given type and its supertypes"""
    # collect via iterables for performance
    # deduplicate via set
    return set(
        chain.from_iterable(getattr(cls, "__slots__", []) for cls in cls.__mro__)
    )


def get_object_attrs(obj):
    """utility to collect all stateful attributes of an object"""
    # __slots__ from full class ancestry
    attrs = get_class_slots(type(obj))
    try:
        # all __dict__ entries
        obj_keys = vars(obj).keys()
        if obj_keys:
            attrs = attrs.copy()
            attrs.update(obj_keys)
    except TypeError:
        pass
    return attrs


def is_index_key(key):
    """Returns whether key can address a position in a list: a non-negative int"""
    return isinstance(key, int) and not isinstance(key, bool) and key >= 0


def normalize_index(index, length):
    """
    Maps a (possibly negative) list index onto its non-negative position.
    Returns None for negative indices that point before the first item.
    """
    if index < 0:
        index += length
        if index < 0:
            return None
    return index


def clamp_index(index, length):
    """
    Clamps an index the way list.insert and JavaScript's Array methods do:
    negative values count from the end, anything outside [0, length] is
    pinned to the nearest bound.
    """
    if index < 0:
        return max(0, index + length)
    return min(index, length)
