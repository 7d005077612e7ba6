from unittest.mock import Mock

import pytest

from ripple import Effect, effect, reactive, ref
from ripple.dep import Dep


def test_effect_runs_immediately():
    counter = ref(0)
    fn = Mock(side_effect=lambda: counter.value)

    runner = effect(fn)

    assert isinstance(runner, Effect)
    assert runner.active
    fn.assert_called_once()

    counter.value = 1
    assert fn.call_count == 2


def test_effect_run_returns_result():
    counter = ref(3)
    runner = Effect(lambda: counter.value * 2)

    assert runner.run() == 6


def test_effect_tracker_restored_on_error():
    counter = ref(0)

    def fail():
        if counter.value:
            raise ValueError("boom")

    effect(fail)

    with pytest.raises(ValueError, match="boom"):
        counter.value = 1

    assert Dep.stack == []

    # other effects still track as usual
    values = []
    effect(lambda: values.append(counter.value))
    counter.value = 0
    assert values == [1, 0]


def test_effect_error_on_first_run():
    def fail():
        raise KeyError("nope")

    with pytest.raises(KeyError):
        effect(fail)

    assert Dep.stack == []


def test_effect_error_aborts_batch():
    counter = ref(0)
    second = Mock()

    def fail():
        if counter.value:
            raise ValueError("boom")

    effect(fail)
    effect(lambda: second(counter.value))
    second.reset_mock()

    with pytest.raises(ValueError):
        counter.value = 1

    second.assert_not_called()

    # the batch after the error is not affected
    counter.value = 0
    second.assert_called_once_with(0)


def test_effect_self_trigger():
    state = reactive({"count": 0})
    fn = Mock(side_effect=lambda: state.update(count=state["count"] + 1))

    effect(fn)

    assert fn.call_count == 1
    assert state["count"] == 1

    state["count"] = 10

    assert fn.call_count == 2
    assert state["count"] == 11


def test_effect_self_trigger_list():
    items = reactive([])

    def push_length():
        items.append(len(items))

    effect(push_length)

    assert items == [0]

    items.append("x")
    # the append above triggered the effect once
    assert items == [0, "x", 2]


def test_effect_stop():
    counter = ref(0)
    fn = Mock(side_effect=lambda: counter.value)
    runner = effect(fn)

    assert runner in counter._dep

    runner.stop()

    assert not runner.active
    assert runner not in counter._dep
    assert len(counter._dep) == 0

    counter.value = 1
    fn.assert_called_once()

    # running a stopped effect is a no-op
    assert runner.run() is None
    fn.assert_called_once()

    # stopping twice is harmless
    runner.stop()


def test_effect_stop_while_running():
    counter = ref(0)
    runner = None

    def stop_self():
        counter.value
        if runner is not None:
            runner.stop()

    runner = effect(stop_self)
    counter.value = 1

    assert not runner.active
    assert len(counter._dep) == 0


def test_effect_rebuilds_deps():
    flag = ref(True)
    a = ref("a")
    b = ref("b")
    values = []

    effect(lambda: values.append(a.value if flag.value else b.value))

    assert len(a._dep) == 1
    assert len(b._dep) == 0

    flag.value = False

    assert len(a._dep) == 0
    assert len(b._dep) == 1

    a.value = "aa"
    b.value = "bb"

    assert values == ["a", "b", "bb"]


def test_nested_effects():
    a = ref(1)
    b = ref(1)
    inner = Effect(lambda: a.value)
    outer_fn = Mock()

    def outer():
        inner.run()
        outer_fn(b.value)

    effect(outer)

    assert inner in a._dep
    # the inner run does not leak into the outer effect
    assert len(a._dep) == 1
    assert len(b._dep) == 1

    a.value = 2
    outer_fn.assert_called_once_with(1)

    b.value = 2
    outer_fn.assert_called_with(2)
    assert Dep.stack == []


def test_effects_notified_in_order():
    counter = ref(0)
    order = []

    effect(lambda: order.append(("first", counter.value)))
    effect(lambda: order.append(("second", counter.value)))
    order.clear()

    counter.value = 1

    assert order == [("first", 1), ("second", 1)]


def test_effect_cycle_detected(monkeypatch):
    monkeypatch.setattr(Effect, "max_recursion", 10)
    a = ref(0)
    b = ref(0)

    def copy_a_to_b():
        b.value = a.value + 1

    def copy_b_to_a():
        a.value = b.value + 1

    effect(copy_a_to_b)

    with pytest.raises(RecursionError, match="Infinite update loop"):
        effect(copy_b_to_a)

    assert Dep.stack == []


def test_effect_converging_loop():
    a = ref(0)
    b = ref(0)

    def copy_a_to_b():
        b.value = min(a.value + 1, 5)

    def copy_b_to_a():
        a.value = min(b.value + 1, 5)

    effect(copy_a_to_b)
    effect(copy_b_to_a)

    # the loop ends as soon as writes stop changing values
    assert a.value == 5
    assert b.value == 5


def test_effect_repr():
    def my_effect():
        pass

    runner = effect(my_effect)

    assert "my_effect" in repr(runner)
    assert "active" in repr(runner)

    runner.stop()
    assert "stopped" in repr(runner)
