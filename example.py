from ripple import computed, reactive, ref, watch

a = reactive({"foo": 5, "items": [1, 2, 3]})


def my_callback(new_value, old_value):
    print(f"{old_value} became {new_value}!")


unwatch = watch(lambda: a["foo"], my_callback)

a["foo"] = 6


@computed
def my_computed_property():
    print("running")
    return 5 * a["foo"]


assert my_computed_property.value == 30
assert my_computed_property.value == 30

a["foo"] = 7
assert my_computed_property.value == 35


@computed
def second_computed_property():
    print("running")
    return 5 * my_computed_property.value


assert second_computed_property.value == 175

a["foo"] = 8
assert second_computed_property.value == 200

unwatch()
a["foo"] = 9  # no longer printed

count = ref(0)
total = computed(lambda: sum(a["items"]) + count.value)

a["items"].append(4)
count.value = 10
assert total.value == 20
