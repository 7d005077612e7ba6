from unittest.mock import Mock

from ripple.dep import Dep


def test_add_remove_sub():
    dep = Dep()
    sub = Mock()

    assert len(dep) == 0
    assert sub not in dep

    dep.add_sub(sub)
    dep.add_sub(sub)

    assert len(dep) == 1
    assert sub in dep

    dep.remove_sub(sub)
    dep.remove_sub(sub)

    assert len(dep) == 0


def test_depend():
    dep = Dep()
    sub = Mock()

    # nothing is running
    dep.depend()
    sub.add_dep.assert_not_called()

    Dep.stack.append(sub)
    try:
        dep.depend()
    finally:
        Dep.stack.pop()

    sub.add_dep.assert_called_once_with(dep)


def test_notify_in_order():
    dep = Dep()
    order = []
    subs = [Mock(), Mock(), Mock()]
    for i, sub in enumerate(subs):
        sub.update.side_effect = lambda i=i: order.append(i)
        dep.add_sub(sub)

    dep.notify()

    assert order == [0, 1, 2]


def test_notify_snapshot():
    dep = Dep()
    first = Mock()
    second = Mock()
    late = Mock()

    # the first subscriber subscribes another one while being updated
    first.update.side_effect = lambda: dep.add_sub(late)
    dep.add_sub(first)
    dep.add_sub(second)

    dep.notify()

    first.update.assert_called_once()
    second.update.assert_called_once()
    late.update.assert_not_called()
    assert late in dep


def test_notify_skips_active():
    dep = Dep()
    active = Mock()
    other = Mock()
    dep.add_sub(active)
    dep.add_sub(other)

    Dep.stack.append(active)
    try:
        dep.notify()
    finally:
        Dep.stack.pop()

    active.update.assert_not_called()
    other.update.assert_called_once()


def test_notify_all_deduplicates():
    length = Dep()
    index = Dep()
    both = Mock()
    only_index = Mock()
    order = []
    both.update.side_effect = lambda: order.append("both")
    only_index.update.side_effect = lambda: order.append("only_index")

    length.add_sub(both)
    index.add_sub(only_index)
    index.add_sub(both)

    Dep.notify_all([length, index, Dep()])

    assert order == ["both", "only_index"]


def test_depend_paused():
    dep = Dep()
    sub = Mock()

    # a None on top of the stack pauses tracking
    Dep.stack.extend([sub, None])
    try:
        assert not Dep.tracking()
        dep.depend()
    finally:
        Dep.stack.clear()

    sub.add_dep.assert_not_called()
    assert len(dep) == 0
