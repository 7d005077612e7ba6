import gc
import logging
import sys
from weakref import ref

from .dep import Dep
from .object_utils import is_index_key

logger = logging.getLogger(__name__)

# Pseudo-key under which the size of a list is tracked
LENGTH = "length"


class ProxyDb:
    """
    Collection of proxies, tracked by the id of the object that they wrap.
    Each time a Proxy is instantiated, it will register itself for the
    wrapped object. And when a Proxy is deleted, then it will unregister.
    When the last proxy that wraps an object is removed, it is uncertain
    what happens to the wrapped object, so in that case the object id is
    removed from the collection.

    Next to the proxy, every entry holds the deps for the keys of the
    target (attrs['keydep']) and, for dicts, a dep for the set of
    keys (attrs['dep']). These outlive the proxy as long as the target
    is still referenced elsewhere, so a new proxy for the same target
    notifies the same subscribers.
    """

    __slots__ = ("db",)

    def __init__(self):
        self.db = {}
        gc.callbacks.append(self.cleanup)

    def cleanup(self, phase, info):
        """
        Callback for garbage collector to cleanup the db for targets
        that have no other references outside of the db
        """
        if phase != "stop":
            return

        keys_to_delete = []
        for key, value in self.db.items():
            # Refs:
            # - sys.getrefcount
            # - ref in db item
            if sys.getrefcount(value["target"]) <= 2:
                # We are the last to hold a reference!
                keys_to_delete.append(key)

        for keys in keys_to_delete:
            # dropping a target can release proxies of nested targets,
            # which dereference (and remove) their own entries
            self.db.pop(keys, None)

        if keys_to_delete:
            logger.debug("Removed %d unreferenced targets", len(keys_to_delete))

    def reference(self, proxy):
        """
        Adds a reference to the collection for the wrapped object's id
        """
        target = proxy.__target__
        obj_id = id(target)

        entry = self.db.get(obj_id)
        if entry is None:
            attrs = {"keydep": {}}
            if isinstance(target, dict):
                attrs["dep"] = Dep()
            entry = self.db[obj_id] = {
                "target": target,
                "attrs": attrs,
                "proxy": None,
            }
        elif entry["proxy"] is not None and entry["proxy"]() is not None:
            raise RuntimeError("Proxy for target already in db")

        entry["proxy"] = ref(proxy)

    def dereference(self, proxy):
        """
        Removes a reference from the database for the given proxy
        """
        obj_id = id(proxy.__target__)
        entry = self.db.get(obj_id)
        if entry is None:
            # When there are failing tests, it might happen that proxies
            # are garbage collected at a point where the proxy_db is already
            # cleared. That's why we need this check here.
            # See fixture [clear_proxy_db](/tests/conftest.py:clear_proxy_db)
            # for more info.
            return

        registered = entry["proxy"]() if entry["proxy"] is not None else None
        if registered is not None and registered is not proxy:
            return

        # The given proxy is the last proxy for the target,
        # so now is a good moment to see if can remove clean the deps
        # for the target object
        ref_count = sys.getrefcount(entry["target"])
        # Ref count is still 3 here because of the reference
        # through proxy.__target__
        if ref_count <= 3:
            # We are the last to hold a reference!
            del self.db[obj_id]

    def attrs(self, proxy):
        try:
            return self.db[id(proxy.__target__)]["attrs"]
        except KeyError:
            # The db was cleared while the proxy stayed alive
            self.reference(proxy)
            return self.db[id(proxy.__target__)]["attrs"]

    def get_proxy(self, target):
        """
        Returns a proxy from the collection for the given object.
        Will return None if there is no (living) proxy for the object's id.
        """
        entry = self.db.get(id(target))
        if entry is None or entry["target"] is not target:
            return None
        if entry["proxy"] is None:
            return None
        return entry["proxy"]()

    def track(self, proxy, key):
        """Record the running effect as subscriber of the key of the target"""
        if not Dep.tracking():
            return
        keydeps = self.attrs(proxy)["keydep"]
        dep = keydeps.get(key)
        if dep is None:
            dep = keydeps[key] = Dep()
        dep.depend()

    def track_iterate(self, proxy):
        """Record the running effect as subscriber of the key set of a dict"""
        if Dep.tracking():
            self.attrs(proxy)["dep"].depend()

    def trigger(self, proxy, key, discard=False):
        """
        Notify the subscribers of the key of the target. With `discard`,
        the dep for the key is dropped before notifying so that
        subscribers that read the key again will start from a new dep.
        """
        keydeps = self.attrs(proxy)["keydep"]
        dep = keydeps.pop(key, None) if discard else keydeps.get(key)
        if dep is not None:
            dep.notify()

    def trigger_iterate(self, proxy):
        self.attrs(proxy)["dep"].notify()

    def trigger_sequence(self, proxy, start, length=True):
        """
        Notify subscribers of a list after a structural change: the ones
        for the length (when `length` is set) and the ones for every index
        from `start` onwards. A subscriber is notified at most once.
        When start is None, no index subscribers are notified.
        """
        keydeps = self.attrs(proxy)["keydep"]
        deps = []
        if length and LENGTH in keydeps:
            deps.append(keydeps[LENGTH])
        if start is not None:
            indices = sorted(
                key for key in keydeps if is_index_key(key) and key >= start
            )
            deps.extend(keydeps[index] for index in indices)
        Dep.notify_all(deps)


# Create a global proxy collection
proxy_db = ProxyDb()
