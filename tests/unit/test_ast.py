import math

import pytest

from json_ast import (
    FALSE,
    NULL,
    TRUE,
    ArrayValue,
    BooleanValue,
    NullValue,
    NumberValue,
    ObjectValue,
    StringValue,
)


def test_structural_equality():
    a = ObjectValue([("k", ArrayValue([NumberValue(1), StringValue("s"), NULL]))])
    b = ObjectValue({"k": ArrayValue([NumberValue(1), StringValue("s"), NullValue()])})
    assert a == b
    assert hash(a) == hash(b)
    assert a != ObjectValue([("k", ArrayValue())])


def test_kinds_do_not_compare_equal_across_types():
    assert BooleanValue(True) != NumberValue(1)
    assert NumberValue(0) != NULL
    assert StringValue("1") != NumberValue(1)
    assert TRUE != FALSE


def test_nan_equals_nan_structurally():
    assert NumberValue(math.nan) == NumberValue(float("nan"))
    assert NumberValue(math.nan) != NumberValue(1.0)


def test_numbers_reject_booleans():
    with pytest.raises(TypeError):
        NumberValue(True)


def test_values_are_immutable():
    with pytest.raises(AttributeError):
        StringValue("a").value = "b"
    arr = ArrayValue([NULL])
    with pytest.raises(TypeError):
        arr.values[0] = TRUE
    obj = ObjectValue([("a", NULL)])
    with pytest.raises(TypeError):
        obj.members["a"] = TRUE
    with pytest.raises(TypeError):
        obj["a"] = TRUE


def test_object_repeated_keys_overwrite_in_place():
    obj = ObjectValue([("a", NumberValue(1)), ("b", NumberValue(2)), ("a", NumberValue(3))])
    assert list(obj) == ["a", "b"]
    assert obj["a"] == NumberValue(3)
    assert "b" in obj and "c" not in obj
    assert obj.get("c") is None


def test_to_python():
    tree = ObjectValue([
        ("n", NULL),
        ("list", ArrayValue([TRUE, FALSE, NumberValue(2.5), NumberValue(10 ** 30)])),
        ("s", StringValue("x")),
    ])
    assert tree.to_python() == {"n": None, "list": [True, False, 2.5, 10 ** 30], "s": "x"}
    assert NumberValue(3).is_integer and not NumberValue(3.0).is_integer


def test_repr_and_kind():
    assert repr(StringValue("x")) == "StringValue('x')"
    assert [v.kind for v in (NULL, TRUE, NumberValue(1), StringValue(""), ArrayValue(), ObjectValue())] == [
        "null", "boolean", "number", "string", "array", "object"]
