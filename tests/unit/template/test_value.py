"""Unit tests for the Value runtime type."""

import math

import pytest

from stencil_core.template import Value
from stencil_core.types import ValueKind


class Point:
    """Opaque host object used for attribute lookups."""

    def __init__(self) -> None:
        self.x = 3
        self._secret = "hidden"

    def norm(self) -> float:
        return 0.0


class TestClassification:
    """Tests for mapping host values onto value kinds."""

    @pytest.mark.parametrize(
        "raw,kind",
        [
            (None, ValueKind.NIL),
            (True, ValueKind.BOOL),
            (3, ValueKind.INTEGER),
            (2.5, ValueKind.FLOAT),
            ("text", ValueKind.STRING),
            ([1, 2], ValueKind.SEQUENCE),
            ((1, 2), ValueKind.SEQUENCE),
            ({"a": 1}, ValueKind.MAPPING),
            (b"bytes", ValueKind.OPAQUE),
            (Point(), ValueKind.OPAQUE),
        ],
    )
    def test_kind(self, raw, kind):
        """Test each host type lands in the expected variant."""
        assert Value(raw).kind is kind

    def test_bool_is_not_a_number(self):
        """Test booleans are their own variant even though bool subclasses int."""
        assert not Value(True).is_number()
        assert Value(1).is_number()
        assert Value(1.0).is_number()

    def test_sets_become_sequences(self):
        """Test sets are exposed as tuples."""
        value = Value({7})
        assert value.is_sequence()
        assert value.raw == (7,)

    def test_wrapping_a_value_unwraps_it(self):
        """Test Value(Value(x)) is equivalent to Value(x)."""
        value = Value(Value(3))
        assert value.is_integer()
        assert value.raw == 3


class TestCoercion:
    """Tests for to_int / to_float / to_str."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (42, 42),
            (3.9, 3),
            ("42", 42),
            (" 7 ", 7),
            ("3.9", 3),
            ("abc", 0),
            (True, 1),
            (None, 0),
            ([1], 0),
        ],
    )
    def test_to_int(self, raw, expected):
        """Test best-effort integer coercion."""
        assert Value(raw).to_int() == expected

    def test_to_int_of_non_finite_float(self):
        """Test inf and nan coerce to 0 instead of raising."""
        assert Value(math.inf).to_int() == 0
        assert Value(math.nan).to_int() == 0

    @pytest.mark.parametrize(
        "raw,expected",
        [(2.5, 2.5), (2, 2.0), ("2.5", 2.5), ("x", 0.0), (False, 0.0), ({"a": 1}, 0.0)],
    )
    def test_to_float(self, raw, expected):
        """Test best-effort float coercion."""
        assert Value(raw).to_float() == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("text", "text"),
            (None, ""),
            (True, "True"),
            (False, "False"),
            (12, "12"),
            (1.5, "1.500000"),
            ([1, "a"], "[1, a]"),
            ({"a": 1}, "{a: 1}"),
        ],
    )
    def test_to_str(self, raw, expected):
        """Test output formatting of each variant."""
        assert Value(raw).to_str() == expected


class TestTruthiness:
    """Tests for is_true / negate / negative."""

    @pytest.mark.parametrize("raw", [None, False, 0, 0.0, "", [], {}])
    def test_falsy(self, raw):
        """Test zero, empty and nil values are false."""
        assert not Value(raw).is_true()

    @pytest.mark.parametrize("raw", [True, 1, -1, 0.5, "0", [0], {"a": None}, Point()])
    def test_truthy(self, raw):
        """Test everything else is true."""
        assert Value(raw).is_true()

    def test_negate_is_logical(self):
        """Test negate returns the boolean complement of is_true."""
        assert Value(0).negate().raw is True
        assert Value("x").negate().raw is False

    def test_negative_flips_sign(self):
        """Test negative is a numeric sign flip."""
        assert Value(3).negative().raw == -3
        assert Value(2.5).negative().raw == -2.5
        assert Value("4").negative().raw == -4
        assert Value(True).negative().raw == -1


class TestContainers:
    """Tests for length, index, slice and iteration."""

    def test_length(self):
        """Test length of sized variants and 0 otherwise."""
        assert Value("abc").length() == 3
        assert Value([1, 2]).length() == 2
        assert Value({"a": 1}).length() == 1
        assert Value(5).length() == 0
        assert Value(None).length() == 0

    def test_can_slice(self):
        """Test only strings and sequences are sliceable."""
        assert Value("abc").can_slice()
        assert Value([1]).can_slice()
        assert not Value({"a": 1}).can_slice()
        assert not Value(1).can_slice()

    def test_index(self):
        """Test indexing strings, sequences and mapping keys."""
        assert Value("abc").index(1).raw == "b"
        assert Value([10, 20]).index(0).raw == 10
        assert Value({"a": 1, "b": 2}).index(1).raw == "b"

    @pytest.mark.parametrize("i", [-1, 3, 100])
    def test_index_out_of_range_is_nil(self, i):
        """Test out-of-range indexes never raise."""
        assert Value("abc").index(i).is_nil()

    def test_index_on_scalar_is_nil(self):
        """Test indexing a number yields nil."""
        assert Value(12).index(0).is_nil()

    def test_slice(self):
        """Test slicing strings and sequences."""
        assert Value("hello").slice(1, 3).raw == "el"
        assert Value([1, 2, 3]).slice(0, 2).raw == [1, 2]
        assert Value({"a": 1, "b": 2}).slice(0, 1).raw == ["a"]

    def test_slice_with_invalid_bounds_is_empty(self):
        """Test invalid bounds return an empty value of the same shape."""
        assert Value("hello").slice(3, 1).raw == ""
        assert Value("hello").slice(0, 99).raw == ""
        assert Value([1, 2]).slice(-1, 1).raw == []
        assert Value(5).slice(0, 1).raw == []

    def test_iterate(self):
        """Test iteration over characters, items and keys."""
        assert [v.raw for v in Value("ab").iterate()] == ["a", "b"]
        assert [v.raw for v in Value([1, 2]).iterate()] == [1, 2]
        assert [v.raw for v in Value({"k": 1}).iterate()] == ["k"]
        assert Value(3).iterate() == []

    def test_items(self):
        """Test key/value pairs for mappings and (index, item) otherwise."""
        assert [(k.raw, v.raw) for k, v in Value({"a": 1}).items()] == [("a", 1)]
        assert [(k.raw, v.raw) for k, v in Value(["x", "y"]).items()] == [(0, "x"), (1, "y")]

    def test_contains(self):
        """Test membership in strings, sequences and mapping keys."""
        assert Value("hello").contains(Value("ell"))
        assert Value([1, 2]).contains(Value(2))
        assert Value([1, 2]).contains(Value(2.0))
        assert Value({"a": 1}).contains(Value("a"))
        assert not Value({"a": 1}).contains(Value(1))
        assert not Value(12).contains(Value(1))


class TestEquality:
    """Tests for equal_value_to."""

    def test_numbers_compare_numerically(self):
        """Test 1 == 1.0."""
        assert Value(1).equal_value_to(Value(1.0))
        assert not Value(1).equal_value_to(Value(2))

    def test_different_kinds_are_unequal(self):
        """Test "1" != 1 and True != 1."""
        assert not Value("1").equal_value_to(Value(1))
        assert not Value(True).equal_value_to(Value(1))

    def test_nil_equals_nil(self):
        """Test nil is equal to itself."""
        assert Value(None).equal_value_to(Value(None))

    def test_sequences_compare_elementwise(self):
        """Test lists and tuples with equal items are equal."""
        assert Value([1, 2]).equal_value_to(Value((1, 2.0)))
        assert not Value([1, 2]).equal_value_to(Value([1]))

    def test_mappings(self):
        """Test mappings compare keys and values."""
        assert Value({"a": 1}).equal_value_to(Value({"a": 1.0}))
        assert not Value({"a": 1}).equal_value_to(Value({"b": 1}))


class TestGetItem:
    """Tests for variable path segment resolution."""

    def test_mapping_key(self):
        """Test string keys resolve in mappings."""
        assert Value({"name": "ada"}).get_item("name").raw == "ada"

    def test_mapping_integer_key(self):
        """Test digit segments fall back to integer keys."""
        assert Value({0: "zero"}).get_item("0").raw == "zero"

    def test_sequence_index(self):
        """Test digit segments index sequences."""
        assert Value(["a", "b"]).get_item("1").raw == "b"
        assert Value(["a", "b"]).get_item("name").is_nil()

    def test_object_attribute(self):
        """Test public attributes of host objects resolve."""
        assert Value(Point()).get_item("x").raw == 3

    def test_private_and_callable_attributes_are_hidden(self):
        """Test underscore names and methods never resolve."""
        point = Value(Point())
        assert point.get_item("_secret").is_nil()
        assert point.get_item("norm").is_nil()
        assert point.get_item("__class__").is_nil()

    def test_missing_is_nil(self):
        """Test unknown segments resolve to nil."""
        assert Value({"a": 1}).get_item("b").is_nil()
        assert Value(3).get_item("real").is_nil()
