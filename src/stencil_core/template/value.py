"""Runtime value union.

Every expression evaluates to a ``Value``: a closed tagged union over nil,
boolean, integer, float, string, sequence, mapping and opaque host objects.
Coercions never raise; an impossible coercion yields the zero of the target
type. Values wrap caller data without copying it and never mutate it.
"""

import math
import numbers
from collections.abc import Mapping, Sequence, Set
from typing import Any

from stencil_core.types import ValueKind

_MISSING = object()


class Value:
    """Immutable wrapper around a single piece of template data."""

    __slots__ = ("_kind", "_raw")

    def __init__(self, raw: Any = None):
        if isinstance(raw, Value):
            self._kind: ValueKind = raw._kind
            self._raw: Any = raw._raw
            return
        self._kind, self._raw = _classify(raw)

    @classmethod
    def nil(cls) -> "Value":
        return cls(None)

    def __repr__(self) -> str:
        return f"Value({self._kind.value}, {self._raw!r})"

    def __str__(self) -> str:
        return self.to_str()

    # -- inspection -------------------------------------------------------

    @property
    def kind(self) -> ValueKind:
        return self._kind

    @property
    def raw(self) -> Any:
        """The wrapped host value (sets come back as tuples)."""
        return self._raw

    def is_nil(self) -> bool:
        return self._kind is ValueKind.NIL

    def is_bool(self) -> bool:
        return self._kind is ValueKind.BOOL

    def is_integer(self) -> bool:
        return self._kind is ValueKind.INTEGER

    def is_float(self) -> bool:
        return self._kind is ValueKind.FLOAT

    def is_number(self) -> bool:
        return self._kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    def is_string(self) -> bool:
        return self._kind is ValueKind.STRING

    def is_sequence(self) -> bool:
        return self._kind is ValueKind.SEQUENCE

    def is_mapping(self) -> bool:
        return self._kind is ValueKind.MAPPING

    # -- coercion ---------------------------------------------------------

    def to_int(self) -> int:
        """Best-effort integer coercion; non-numeric input gives 0."""
        kind = self._kind
        if kind is ValueKind.INTEGER:
            return self._raw
        if kind is ValueKind.FLOAT:
            return int(self._raw) if math.isfinite(self._raw) else 0
        if kind is ValueKind.BOOL:
            return 1 if self._raw else 0
        if kind is ValueKind.STRING:
            text = self._raw.strip()
            try:
                return int(text)
            except ValueError:
                pass
            try:
                number = float(text)
            except ValueError:
                return 0
            return int(number) if math.isfinite(number) else 0
        return 0

    def to_float(self) -> float:
        """Best-effort float coercion; non-numeric input gives 0.0."""
        kind = self._kind
        if kind is ValueKind.FLOAT:
            return self._raw
        if kind is ValueKind.INTEGER:
            try:
                return float(self._raw)
            except OverflowError:
                return math.inf if self._raw > 0 else -math.inf
        if kind is ValueKind.BOOL:
            return 1.0 if self._raw else 0.0
        if kind is ValueKind.STRING:
            try:
                return float(self._raw.strip())
            except ValueError:
                return 0.0
        return 0.0

    def to_str(self) -> str:
        """Render the value the way ``{{ }}`` outputs it."""
        kind = self._kind
        if kind is ValueKind.STRING:
            return self._raw
        if kind is ValueKind.NIL:
            return ""
        if kind is ValueKind.BOOL:
            return "True" if self._raw else "False"
        if kind is ValueKind.INTEGER:
            return str(self._raw)
        if kind is ValueKind.FLOAT:
            return "%f" % self._raw
        if kind is ValueKind.SEQUENCE:
            return "[" + ", ".join(Value(item).to_str() for item in self._raw) + "]"
        if kind is ValueKind.MAPPING:
            pairs = (f"{Value(k).to_str()}: {Value(v).to_str()}" for k, v in self._raw.items())
            return "{" + ", ".join(pairs) + "}"
        return str(self._raw)

    def is_true(self) -> bool:
        """Truthiness: nil, False, zero and empty containers are false."""
        kind = self._kind
        if kind is ValueKind.NIL:
            return False
        if kind is ValueKind.BOOL:
            return self._raw
        if kind in (ValueKind.INTEGER, ValueKind.FLOAT):
            return self._raw != 0
        if kind in (ValueKind.STRING, ValueKind.SEQUENCE, ValueKind.MAPPING):
            return len(self._raw) > 0
        return True

    def negate(self) -> "Value":
        """Logical complement: always a boolean, the opposite of ``is_true()``."""
        return Value(not self.is_true())

    def negative(self) -> "Value":
        """Numeric sign flip; non-numbers are coerced to integer first."""
        if self._kind in (ValueKind.INTEGER, ValueKind.FLOAT):
            return Value(-self._raw)
        return Value(-self.to_int())

    # -- containers -------------------------------------------------------

    def length(self) -> int:
        if self._kind in (ValueKind.STRING, ValueKind.SEQUENCE, ValueKind.MAPPING):
            return len(self._raw)
        return 0

    def can_slice(self) -> bool:
        return self._kind in (ValueKind.STRING, ValueKind.SEQUENCE)

    def index(self, i: int) -> "Value":
        """Item ``i`` (mappings index their keys); nil when out of range."""
        if i < 0 or i >= self.length():
            return Value()
        if self._kind is ValueKind.MAPPING:
            return Value(list(self._raw.keys())[i])
        return Value(self._raw[i])

    def slice(self, start: int, stop: int) -> "Value":
        """Items ``start:stop``; an empty value when the bounds are invalid."""
        size = self.length()
        if self._kind is ValueKind.STRING:
            empty: Any = ""
        else:
            empty = []
        if not (0 <= start <= stop <= size):
            return Value(empty)
        if self._kind is ValueKind.STRING:
            return Value(self._raw[start:stop])
        if self._kind is ValueKind.SEQUENCE:
            return Value(list(self._raw[start:stop]))
        if self._kind is ValueKind.MAPPING:
            return Value(list(self._raw.keys())[start:stop])
        return Value(empty)

    def iterate(self) -> list["Value"]:
        """Items a ``for`` loop visits: elements, characters or mapping keys."""
        if self._kind is ValueKind.SEQUENCE:
            return [Value(item) for item in self._raw]
        if self._kind is ValueKind.STRING:
            return [Value(char) for char in self._raw]
        if self._kind is ValueKind.MAPPING:
            return [Value(key) for key in self._raw]
        return []

    def items(self) -> list[tuple["Value", "Value"]]:
        """Key/value pairs of a mapping, ``(index, item)`` pairs otherwise."""
        if self._kind is ValueKind.MAPPING:
            return [(Value(k), Value(v)) for k, v in self._raw.items()]
        return [(Value(i), item) for i, item in enumerate(self.iterate())]

    def contains(self, item: "Value") -> bool:
        """Membership test used by the ``in`` operator."""
        if self._kind is ValueKind.STRING:
            return item.to_str() in self._raw
        if self._kind is ValueKind.SEQUENCE:
            return any(Value(element).equal_value_to(item) for element in self._raw)
        if self._kind is ValueKind.MAPPING:
            return any(Value(key).equal_value_to(item) for key in self._raw)
        return False

    def equal_value_to(self, other: "Value") -> bool:
        """Compare by coerced value: 1 == 1.0, but "1" != 1."""
        if self.is_number() and other.is_number():
            if self.is_integer() and other.is_integer():
                return self._raw == other._raw
            return self.to_float() == other.to_float()
        if self._kind is not other._kind:
            return False
        if self._kind is ValueKind.NIL:
            return True
        if self._kind is ValueKind.SEQUENCE:
            if len(self._raw) != len(other._raw):
                return False
            return all(Value(a).equal_value_to(Value(b)) for a, b in zip(self._raw, other._raw))
        if self._kind is ValueKind.MAPPING:
            if self._raw.keys() != other._raw.keys():
                return False
            return all(Value(v).equal_value_to(Value(other._raw[k])) for k, v in self._raw.items())
        return bool(self._raw == other._raw)

    def get_item(self, key: str) -> "Value":
        """Resolve one segment of a dotted variable path.

        Mappings are looked up by key, sequences and strings by decimal index,
        opaque objects by public non-callable attribute. Anything else is nil.
        """
        kind = self._kind
        if kind is ValueKind.MAPPING:
            if key in self._raw:
                return Value(self._raw[key])
            if key.isdigit() and int(key) in self._raw:
                return Value(self._raw[int(key)])
            return Value()
        if kind in (ValueKind.SEQUENCE, ValueKind.STRING):
            if key.isdigit():
                return self.index(int(key))
            return Value()
        if kind is ValueKind.OPAQUE:
            if key.startswith("_"):
                return Value()
            attr = getattr(self._raw, key, _MISSING)
            if attr is _MISSING or callable(attr):
                return Value()
            return Value(attr)
        return Value()


def _classify(raw: Any) -> tuple[ValueKind, Any]:
    if raw is None:
        return ValueKind.NIL, None
    if isinstance(raw, bool):
        return ValueKind.BOOL, raw
    if isinstance(raw, str):
        return ValueKind.STRING, raw
    if isinstance(raw, numbers.Integral):
        return ValueKind.INTEGER, int(raw)
    if isinstance(raw, numbers.Real):
        return ValueKind.FLOAT, float(raw)
    if isinstance(raw, Mapping):
        return ValueKind.MAPPING, raw
    if isinstance(raw, (bytes, bytearray)):
        return ValueKind.OPAQUE, raw
    if isinstance(raw, Sequence):
        return ValueKind.SEQUENCE, raw
    if isinstance(raw, Set):
        return ValueKind.SEQUENCE, tuple(raw)
    return ValueKind.OPAQUE, raw
