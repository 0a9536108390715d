"""
Query validation and evaluation

A query is a dict whose keys are logical combinators ($and, $or, $not,
$where) or field names. Field values are either a scalar (implicit equality)
or an operator set such as ``{"$gte": 2, "$lt": 10}``.

Validation and evaluation are separate passes. ``validate_query`` checks the
syntax once and logs the first problem it finds; ``match_query`` assumes a
validated query and only decides whether a document matches.
"""

import logging
from typing import Any, Callable, Dict, List

from .operators import check_operand, evaluate_operator_set
from .values import (
    ID_FIELD,
    DocMap,
    Document,
    deep_copy,
    describe_type,
    get_field,
    is_scalar,
    strict_equals,
)

logger = logging.getLogger(__name__)

WherePredicate = Callable[[Document], Any]

LOGICAL_OPERATORS = frozenset({"$and", "$or", "$not", "$where"})


def _invalid(message: str) -> bool:
    logger.error(f"query :: {message}")
    return False


def validate_query(query: Any) -> bool:
    """Check query syntax recursively without evaluating it"""
    if not isinstance(query, dict):
        return _invalid(f"The query is not an object. Given: {describe_type(query)}")

    for key, operand in query.items():
        if key in ("$and", "$or"):
            if not isinstance(operand, list):
                return _invalid(
                    f"{key} value is not an array. Given: {describe_type(operand)}"
                )
            if not all(validate_query(sub_query) for sub_query in operand):
                return False

        elif key == "$not":
            if not validate_query(operand):
                return False

        elif key == "$where":
            if not callable(operand):
                return _invalid(
                    f"$where value is not a function. Given: {describe_type(operand)}"
                )

        elif not isinstance(key, str):
            return _invalid(f"Query keys must be strings. Given: {key!r}")

        elif key.startswith("$"):
            return _invalid(f"Unknown logical operator. Given: {key}")

        elif isinstance(operand, dict):
            for op, op_operand in operand.items():
                error = check_operand(op, op_operand)
                if error:
                    return _invalid(error)

        elif not is_scalar(operand):
            return _invalid(
                f"Value of field '{key}' is not a scalar or an operator set. "
                f"Given: {describe_type(operand)}"
            )

    return True


def match_query(document: Document, query: Dict[str, Any]) -> bool:
    """Evaluate a validated query against a document"""
    for key, operand in query.items():
        if key == "$and":
            if not all(match_query(document, sub_query) for sub_query in operand):
                return False

        elif key == "$or":
            if not any(match_query(document, sub_query) for sub_query in operand):
                return False

        elif key == "$not":
            if match_query(document, operand):
                return False

        elif key == "$where":
            if not operand(deep_copy(document)):
                return False

        elif isinstance(operand, dict):
            if not evaluate_operator_set(get_field(document, key), operand):
                return False

        elif not strict_equals(get_field(document, key), operand):
            return False

    return True


def _is_id_lookup(query: Dict[str, Any]) -> bool:
    return len(query) == 1 and isinstance(query.get(ID_FIELD), str)


def query_ids(store: DocMap, query: Any) -> List[str]:
    """Return the ids of all matching documents, in store order"""
    if not validate_query(query):
        return []

    if not query:
        return list(store)

    if _is_id_lookup(query):
        doc_id = query[ID_FIELD]
        return [doc_id] if doc_id in store else []

    return [doc_id for doc_id, document in store.items() if match_query(document, query)]


def query_one_id(store: DocMap, query: Any) -> str:
    """Return the id of the first matching document, or an empty string"""
    if not validate_query(query):
        return ""

    if _is_id_lookup(query):
        doc_id = query[ID_FIELD]
        return doc_id if doc_id in store else ""

    for doc_id, document in store.items():
        if match_query(document, query):
            return doc_id

    return ""
