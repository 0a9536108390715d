"""
Per-field query operators

Each operator is registered with two callables:

- a contract check on the operand, used by the query validator. It returns an
  error message, or None when the operand is acceptable.
- an evaluator that receives the document's field value (MISSING when the
  field is not defined) and the operand, and returns a bool.

Evaluators never coerce between variants: a number is never compared to a
string, and a boolean is never equal to a number.
"""

import operator
import re
from typing import Any, Callable, Dict, Optional, Tuple

from .values import (
    MISSING,
    ValueType,
    contains_strict,
    describe_type,
    is_number,
    is_scalar,
    strict_equals,
    value_type,
)

OperandCheck = Callable[[str, Any], Optional[str]]
Evaluator = Callable[[Any, Any], bool]

TYPE_NAMES = frozenset(vtype.value for vtype in ValueType)


# =========================
# Operand contracts
# =========================
def _check_exists(op: str, operand: Any) -> Optional[str]:
    if isinstance(operand, bool):
        return None
    if is_number(operand) and operand in (0, 1):
        return None
    return f"{op} operand is not true, false, 1, or 0. Given: {operand!r}"


def _check_scalar(op: str, operand: Any) -> Optional[str]:
    if is_scalar(operand):
        return None
    return f"{op} operand is not a scalar. Given: {describe_type(operand)}"


def _check_orderable(op: str, operand: Any) -> Optional[str]:
    if is_number(operand) or isinstance(operand, str):
        return None
    return f"{op} operand is not a string or a number. Given: {describe_type(operand)}"


def _check_scalar_list(op: str, operand: Any) -> Optional[str]:
    if not isinstance(operand, list):
        return f"{op} operand is not an array. Given: {describe_type(operand)}"
    if not all(is_scalar(item) for item in operand):
        return f"{op} operand must contain only scalars"
    return None


def _check_pattern(op: str, operand: Any) -> Optional[str]:
    if not isinstance(operand, str):
        return f"{op} operand is not a string. Given: {describe_type(operand)}"
    try:
        compile_pattern(operand)
    except re.error as e:
        return f"{op} operand is not a valid pattern: {e}"
    return None


def _check_type_name(op: str, operand: Any) -> Optional[str]:
    if not isinstance(operand, str):
        return f"{op} operand is not a string. Given: {describe_type(operand)}"
    if operand not in TYPE_NAMES:
        return f"{op} operand is not one of {sorted(TYPE_NAMES)}. Given: {operand}"
    return None


# =========================
# Evaluators
# =========================
def compile_pattern(pattern: str) -> "re.Pattern[str]":
    # re keeps its own cache of compiled patterns
    return re.compile(pattern, re.IGNORECASE)


def _eval_exists(value: Any, operand: Any) -> bool:
    if operand:
        return value is not MISSING
    return value is MISSING


def _eval_eq(value: Any, operand: Any) -> bool:
    return strict_equals(value, operand)


def _eval_ne(value: Any, operand: Any) -> bool:
    return not strict_equals(value, operand)


def _ordering(compare: Callable[[Any, Any], bool]) -> Evaluator:
    def evaluate(value: Any, operand: Any) -> bool:
        if (is_number(value) and is_number(operand)) or (
            isinstance(value, str) and isinstance(operand, str)
        ):
            return compare(value, operand)
        return False

    return evaluate


def _eval_in(value: Any, operand: Any) -> bool:
    return contains_strict(operand, value)


def _eval_nin(value: Any, operand: Any) -> bool:
    return not contains_strict(operand, value)


def _eval_includes(value: Any, operand: Any) -> bool:
    if isinstance(value, str):
        return isinstance(operand, str) and operand in value
    if isinstance(value, list):
        return contains_strict(value, operand)
    return False


def _eval_like(value: Any, operand: Any) -> bool:
    if not (isinstance(value, str) and isinstance(operand, str)):
        return False
    try:
        return compile_pattern(operand).search(value) is not None
    except re.error:
        return False


def _eval_type(value: Any, operand: Any) -> bool:
    vtype = value_type(value)
    return vtype is not None and vtype.value == operand


OPERATORS: Dict[str, Tuple[OperandCheck, Evaluator]] = {
    "$exists": (_check_exists, _eval_exists),
    "$eq": (_check_scalar, _eval_eq),
    "$ne": (_check_scalar, _eval_ne),
    "$gt": (_check_orderable, _ordering(operator.gt)),
    "$gte": (_check_orderable, _ordering(operator.ge)),
    "$lt": (_check_orderable, _ordering(operator.lt)),
    "$lte": (_check_orderable, _ordering(operator.le)),
    "$in": (_check_scalar_list, _eval_in),
    "$nin": (_check_scalar_list, _eval_nin),
    "$includes": (_check_scalar, _eval_includes),
    "$like": (_check_pattern, _eval_like),
    "$type": (_check_type_name, _eval_type),
}


def check_operand(op: str, operand: Any) -> Optional[str]:
    """Return an error message when ``op``/``operand`` is not a valid pair"""
    entry = OPERATORS.get(op)
    if entry is None:
        return f"Unknown query operator. Given: {op}"
    check, _ = entry
    return check(op, operand)


def evaluate_operator(value: Any, op: str, operand: Any) -> bool:
    """Apply one operator to a field value; unknown operators never match"""
    entry = OPERATORS.get(op)
    if entry is None:
        return False
    _, evaluate = entry
    return evaluate(value, operand)


def evaluate_operator_set(value: Any, operator_set: Dict[str, Any]) -> bool:
    """All operators of the set must hold for the field value"""
    return all(
        evaluate_operator(value, op, operand) for op, operand in operator_set.items()
    )
