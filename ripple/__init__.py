from importlib.metadata import version

__version__ = version("ripple")


from .computed import ComputedRef, computed
from .effect import Effect, effect
from .proxy import is_reactive, reactive, to_raw
from .ref import Ref, is_ref, ref, unref
from .watcher import Watcher, watch, watch_effect

__all__ = (
    "ComputedRef",
    "Effect",
    "Ref",
    "Watcher",
    "computed",
    "effect",
    "is_reactive",
    "is_ref",
    "reactive",
    "ref",
    "to_raw",
    "unref",
    "watch",
    "watch_effect",
)
