"""
Tests for the document value model.
"""

from datetime import date

import pytest

from jsondb.engine.values import (
    MISSING,
    ValueType,
    contains_strict,
    deep_copy,
    describe_type,
    get_field,
    is_field_name,
    is_scalar,
    is_value,
    strict_equals,
    value_type,
)


class TestValueType:
    """Classification of Python values into document variants."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ValueType.NULL),
            (True, ValueType.BOOLEAN),
            (False, ValueType.BOOLEAN),
            (0, ValueType.NUMBER),
            (2.5, ValueType.NUMBER),
            ("", ValueType.STRING),
            ([1, 2], ValueType.ARRAY),
            ({"a": 1}, ValueType.OBJECT),
        ],
    )
    def test_variants(self, value, expected):
        assert value_type(value) is expected

    def test_missing_and_foreign_values(self):
        assert value_type(MISSING) is None
        assert value_type(object()) is None

    def test_scalars(self):
        assert is_scalar(None)
        assert is_scalar("x")
        assert is_scalar(False)
        assert not is_scalar([])
        assert not is_scalar({})
        assert not is_scalar(MISSING)


class TestStrictEquals:
    """Equality without coercion between variants."""

    def test_bool_is_not_number(self):
        assert not strict_equals(True, 1)
        assert not strict_equals(0, False)

    def test_number_is_not_string(self):
        assert not strict_equals(4, "4")

    def test_int_and_float_are_numbers(self):
        assert strict_equals(1, 1.0)

    def test_missing_equals_nothing(self):
        assert not strict_equals(MISSING, MISSING)
        assert not strict_equals(MISSING, None)

    def test_nested_structures(self):
        assert strict_equals({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]})
        assert not strict_equals({"a": [1]}, {"a": [True]})
        assert not strict_equals([1, 2], [1, 2, 3])

    def test_contains_strict(self):
        assert contains_strict([1, "a", None], None)
        assert not contains_strict([1, 2], True)


class TestFieldAccess:
    """Field lookup and naming rules."""

    def test_get_field(self):
        doc = {"a": None}
        assert get_field(doc, "a") is None
        assert get_field(doc, "b") is MISSING

    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert type(MISSING)() is MISSING

    def test_field_names(self):
        assert is_field_name("name")
        assert not is_field_name("")
        assert not is_field_name("$set")
        assert not is_field_name(3)

    def test_describe_type(self):
        assert describe_type(MISSING) == "undefined"
        assert describe_type([]) == "array"
        assert describe_type(object()) == "object"

    def test_deep_copy_is_detached(self):
        original = {"a": {"b": [1]}}
        copied = deep_copy(original)
        copied["a"]["b"].append(2)
        assert original == {"a": {"b": [1]}}


class TestIsValue:
    """Values that survive a snapshot unchanged."""

    def test_json_values(self):
        assert is_value({"a": [1, 2.5, None, True, "x", {"b": []}]})
        assert is_value([])

    @pytest.mark.parametrize(
        "value",
        [
            date(2020, 1, 1),
            {1, 2},
            (1, 2),
            {"m": {1: "a"}},
            [{"ok": 1}, object()],
            MISSING,
        ],
    )
    def test_non_json_values(self, value):
        assert not is_value(value)
