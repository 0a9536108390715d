"""
jsondb engine: query validation and evaluation, projection and updates over
in-memory documents. Nothing in this package touches the file system.
"""

from .values import MISSING, ValueType, value_type, strict_equals, deep_copy
from .ids import make_id, uid
from .operators import OPERATORS, check_operand, evaluate_operator
from .query import validate_query, match_query, query_ids, query_one_id
from .projection import project
from .update import UPDATE_OPERATORS, apply_update

__all__ = [
    "MISSING",
    "ValueType",
    "value_type",
    "strict_equals",
    "deep_copy",
    "make_id",
    "uid",
    "OPERATORS",
    "check_operand",
    "evaluate_operator",
    "validate_query",
    "match_query",
    "query_ids",
    "query_one_id",
    "project",
    "UPDATE_OPERATORS",
    "apply_update",
]
