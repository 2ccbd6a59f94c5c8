# json_ast.py
# Immutable JSON value tree produced by json_parser.parse
#
# Every node derives from Value and can be turned back into plain Python
# data with to_python(). Nodes compare structurally, so two parses of the
# same document are equal.

import math
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Tuple, Union

Number = Union[int, float]


class Value:
    """Base of all JSON nodes."""

    __slots__ = ()
    kind = "value"

    def to_python(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_python()!r})"


class NullValue(Value):
    __slots__ = ()
    kind = "null"

    def to_python(self) -> None:
        return None

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return isinstance(other, NullValue)

    def __hash__(self):
        return hash(None)


class BooleanValue(Value):
    __slots__ = ("value",)
    kind = "boolean"

    def __init__(self, value: bool):
        object.__setattr__(self, "value", bool(value))

    def to_python(self) -> bool:
        return self.value

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return isinstance(other, BooleanValue) and other.value == self.value

    def __hash__(self):
        return hash(("boolean", self.value))


class NumberValue(Value):
    """
    Integer literals keep an exact int; everything else is a float.

    NaN compares equal to NaN here so that parsed trees can be compared
    structurally.
    """

    __slots__ = ("value",)
    kind = "number"

    def __init__(self, value: Number):
        if isinstance(value, bool):
            raise TypeError("booleans are not numbers")
        object.__setattr__(self, "value", value)

    def to_python(self) -> Number:
        return self.value

    @property
    def is_integer(self) -> bool:
        return isinstance(self.value, int)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        if not isinstance(other, NumberValue):
            return False
        a, b = self.value, other.value
        if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
            return True
        return a == b

    def __hash__(self):
        if isinstance(self.value, float) and math.isnan(self.value):
            return hash(("number", "nan"))
        return hash(("number", self.value))


class StringValue(Value):
    __slots__ = ("value",)
    kind = "string"

    def __init__(self, value: str):
        object.__setattr__(self, "value", value)

    def to_python(self) -> str:
        return self.value

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return isinstance(other, StringValue) and other.value == self.value

    def __hash__(self):
        return hash(("string", self.value))


class ArrayValue(Value):
    """Ordered, immutable sequence of values."""

    __slots__ = ("values",)
    kind = "array"

    def __init__(self, values: Iterable[Value] = ()):
        object.__setattr__(self, "values", tuple(values))

    def to_python(self) -> list:
        return [v.to_python() for v in self.values]

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.values)

    def __getitem__(self, index) -> Value:
        return self.values[index]

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return isinstance(other, ArrayValue) and other.values == self.values

    def __hash__(self):
        return hash(("array", self.values))


class ObjectValue(Value):
    """
    Read-only mapping of member name to value.

    Built from (key, value) pairs: a repeated key overwrites the earlier
    value but keeps the slot of its first occurrence.
    """

    __slots__ = ("members",)
    kind = "object"

    def __init__(self, pairs: Union[Iterable[Tuple[str, Value]], Mapping[str, Value]] = ()):
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        members: Dict[str, Value] = {}
        for key, value in pairs:
            members[key] = value
        object.__setattr__(self, "members", MappingProxyType(members))

    def to_python(self) -> dict:
        return {k: v.to_python() for k, v in self.members.items()}

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[str]:
        return iter(self.members)

    def __contains__(self, key) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> Value:
        return self.members[key]

    def get(self, key: str, default=None):
        return self.members.get(key, default)

    def keys(self):
        return self.members.keys()

    def items(self):
        return self.members.items()

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return isinstance(other, ObjectValue) and dict(other.members) == dict(self.members)

    def __hash__(self):
        return hash(("object", frozenset(self.members.items())))


NULL = NullValue()
TRUE = BooleanValue(True)
FALSE = BooleanValue(False)
