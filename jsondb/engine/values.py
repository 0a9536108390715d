"""
Value model for jsondb documents

Documents are plain JSON-like Python values. This module names the variants
of that recursive value and gives the engine one place to classify, compare
and copy them:

- ValueType: the six dynamic variants (null, boolean, number, string, array, object)
- value_type(): classify a Python value into its variant
- strict_equals(): variant-aware equality with no coercion
- deep_copy(): detached copy used whenever a value crosses the store boundary
"""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Scalar = Union[None, bool, int, float, str]
Value = Union[Scalar, List[Any], Dict[str, Any]]
Document = Dict[str, Any]
DocMap = Dict[str, Document]

ID_FIELD = "_id"


class _Missing:
    """Marker for a field that is not defined on a document"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class ValueType(Enum):
    """Dynamic variants of a document value"""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def value_type(value: Any) -> Optional[ValueType]:
    """Classify a value; returns None for MISSING and non-JSON values"""
    # bool is checked before int: True is an int in Python but not a number here
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, list):
        return ValueType.ARRAY
    if isinstance(value, dict):
        return ValueType.OBJECT
    return None


def is_number(value: Any) -> bool:
    return value_type(value) is ValueType.NUMBER


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_scalar(value: Any) -> bool:
    """True for null, boolean, number and string values"""
    return value_type(value) in (
        ValueType.NULL,
        ValueType.BOOLEAN,
        ValueType.NUMBER,
        ValueType.STRING,
    )


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def is_value(value: Any) -> bool:
    """True when ``value`` is storable: JSON variants all the way down.

    Objects must have string keys, so a stored document reads back from its
    snapshot unchanged. Tuples, sets, dates and other Python objects are not
    values.
    """
    vtype = value_type(value)
    if vtype is None:
        return False
    if vtype is ValueType.ARRAY:
        return all(is_value(item) for item in value)
    if vtype is ValueType.OBJECT:
        return all(
            isinstance(key, str) and is_value(item) for key, item in value.items()
        )
    return True


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion between variants.

    ``True`` never equals ``1`` and MISSING equals nothing, not even MISSING.
    Arrays and objects compare element by element under the same rule.
    """
    left_type = value_type(left)
    if left_type is None or left_type is not value_type(right):
        return False

    if left_type is ValueType.ARRAY:
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )

    if left_type is ValueType.OBJECT:
        return left.keys() == right.keys() and all(
            strict_equals(left[key], right[key]) for key in left
        )

    return left == right


def contains_strict(items: List[Any], value: Any) -> bool:
    """Membership test using strict_equals"""
    return any(strict_equals(item, value) for item in items)


def deep_copy(value: Any) -> Any:
    return copy.deepcopy(value)


def get_field(document: Document, field: str) -> Any:
    """Resolve a top-level field, MISSING when it is not defined"""
    return document.get(field, MISSING)


def is_field_name(name: Any) -> bool:
    """A legal document field name: non-empty string not starting with '$'"""
    return isinstance(name, str) and name != "" and not name.startswith("$")


def describe_type(value: Any) -> str:
    """Human-readable variant name for diagnostics"""
    if value is MISSING:
        return "undefined"
    vtype = value_type(value)
    if vtype is None:
        return type(value).__name__
    return vtype.value
