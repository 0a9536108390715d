"""
Update operators applied to a single document in place

Supported operators: $inc, $push, $rename, $set, $unset.

Every field mutation is checked on its own. A mutation that breaks a rule is
skipped and logged, the others still apply, and nothing is rolled back.
``apply_update`` returns 1 when at least one mutation changed the document
and 0 otherwise.
"""

import logging
from typing import Any, Callable, Dict

from .values import (
    ID_FIELD,
    Document,
    deep_copy,
    describe_type,
    is_field_name,
    is_number,
    is_value,
)

logger = logging.getLogger(__name__)

ORIGIN = "update"


def _refuse(message: str) -> bool:
    logger.error(f"{ORIGIN} :: {message}")
    return False


def _inc(document: Document, field: str, delta: Any) -> bool:
    if not is_number(delta):
        return _refuse("Cannot $inc with a non-numeric delta")
    if field == ID_FIELD:
        return _refuse("Cannot $inc _id")

    if field not in document:
        if not is_field_name(field):
            return _refuse(f"Cannot $inc an invalid field name. Given: {field!r}")
        document[field] = delta
        return True

    current = document[field]
    if not is_number(current):
        return _refuse(f"Cannot $inc field of type: {describe_type(current)}")

    document[field] = current + delta
    return True


def _push(document: Document, field: str, value: Any) -> bool:
    if field == ID_FIELD:
        return _refuse("Cannot $push to _id")

    if not is_value(value):
        return _refuse(f"Cannot $push a value of type: {describe_type(value)}")

    if field not in document:
        if not is_field_name(field):
            return _refuse(f"Cannot $push to an invalid field name. Given: {field!r}")
        document[field] = [deep_copy(value)]
        return True

    current = document[field]
    if not isinstance(current, list):
        return _refuse(f"Cannot $push to field of type: {describe_type(current)}")

    current.append(deep_copy(value))
    return True


def _rename(document: Document, field: str, new_name: Any) -> bool:
    if field == ID_FIELD:
        return _refuse("Cannot $rename _id")
    if not isinstance(new_name, str):
        return _refuse("Cannot $rename to a non-string name")
    if not is_field_name(new_name):
        return _refuse(f"Cannot $rename to an invalid field name. Given: {new_name!r}")
    if new_name in document:
        return _refuse("Cannot $rename to an existing name")
    if field not in document:
        return _refuse("Cannot $rename a non-existing field")

    document[new_name] = deep_copy(document[field])
    del document[field]
    return True


def _set(document: Document, field: str, value: Any) -> bool:
    if field == ID_FIELD:
        return _refuse("Cannot $set _id")
    if not is_field_name(field):
        return _refuse(f"Cannot $set an invalid field name. Given: {field!r}")
    if not is_value(value):
        return _refuse(f"Cannot $set a value of type: {describe_type(value)}")

    document[field] = deep_copy(value)
    return True


def _unset(document: Document, field: str, flag: Any) -> bool:
    if field == ID_FIELD:
        return _refuse("Cannot $unset _id")

    if field in document and flag:
        del document[field]
        return True
    return False


UPDATE_OPERATORS: Dict[str, Callable[[Document, str, Any], bool]] = {
    "$inc": _inc,
    "$push": _push,
    "$rename": _rename,
    "$set": _set,
    "$unset": _unset,
}


def apply_update(document: Document, update: Any) -> int:
    """Apply ``update`` to ``document`` in place.

    Returns 1 if anything changed, 0 otherwise. This is a flag for the whole
    document, not a count of changed fields.
    """
    if not isinstance(update, dict):
        _refuse(f"The update is not an object. Given: {describe_type(update)}")
        return 0

    if not update:
        _refuse("The update has no operators")
        return 0

    updated = 0

    for op, operand in update.items():
        apply_field = UPDATE_OPERATORS.get(op)
        if apply_field is None:
            _refuse(f"Wrong update operator. Given: {op}")
            continue

        if not isinstance(operand, dict):
            _refuse(f"{op} value is not an object. Given: {describe_type(operand)}")
            continue

        for field, value in operand.items():
            if apply_field(document, field, value):
                updated = 1

    return updated
