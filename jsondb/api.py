"""
Action dispatch for jsondb

Maps a request dict such as::

    {"db_name": "users", "action": "find", "query": {"age": {"$gt": 30}}, "projection": {"name": 1}}

onto a Collection call and normalizes the outcome into::

    {"status": 200, "error": None, "data": [...]}

Status 400 reports a malformed request, status 500 a store or internal
failure. Requests carry plain data only, so ``$where`` is rejected here: it is
an in-process callable and never part of a transmitted query.
"""

import copy
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .errors import JsonDBError
from .registry import DatabaseRegistry

logger = logging.getLogger(__name__)

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_ERROR = 500

# Data returned with a failed response, per action
FAILURE_DATA: Dict[str, Any] = {
    "count": 0,
    "find": [],
    "findOne": None,
    "insert": None,
    "remove": 0,
    "update": 0,
    "save": 0,
}

ACTION_ALIASES = {"find_one": "findOne"}


class BadRequest(Exception):
    """Request shape is invalid"""


def _response(status: int, error: Optional[str], data: Any) -> Dict[str, Any]:
    return {"status": status, "error": error, "data": data}


def _has_where(query: Any) -> bool:
    if isinstance(query, dict):
        return any(key == "$where" or _has_where(value) for key, value in query.items())
    if isinstance(query, list):
        return any(_has_where(item) for item in query)
    return False


def _require_mapping(request: Mapping[str, Any], key: str, default: Any = None) -> Dict[str, Any]:
    value = request.get(key, default)
    if not isinstance(value, dict):
        raise BadRequest(f"Invalid {key} provided")
    return value


def _require_query(request: Mapping[str, Any]) -> Dict[str, Any]:
    query = _require_mapping(request, "query")
    if _has_where(query):
        raise BadRequest("Invalid query provided: $where is not accepted in requests")
    return query


def _count_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    return (_require_query(request),)


def _find_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    return _require_query(request), _require_mapping(request, "projection", {})


def _insert_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    # insert tolerates null options
    options = request.get("options")
    if options is None:
        options = {}
    elif not isinstance(options, dict):
        raise BadRequest("Invalid options provided")
    return _require_mapping(request, "doc"), options


def _remove_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    return _require_query(request), _require_mapping(request, "options", {})


def _update_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    return (
        _require_query(request),
        _require_mapping(request, "update"),
        _require_mapping(request, "options", {}),
    )


def _save_args(request: Mapping[str, Any]) -> Tuple[Any, ...]:
    return ()


# action -> (Collection method, request parser)
ACTIONS: Dict[str, Tuple[str, Callable[[Mapping[str, Any]], Tuple[Any, ...]]]] = {
    "count": ("count", _count_args),
    "find": ("find", _find_args),
    "findOne": ("find_one", _find_args),
    "insert": ("insert", _insert_args),
    "remove": ("remove", _remove_args),
    "update": ("update", _update_args),
    "save": ("save", _save_args),
}


class DatabaseApi:
    """Request/response front end over a DatabaseRegistry"""

    def __init__(self, registry: DatabaseRegistry):
        self.registry = registry

    def call(self, request: Any) -> Dict[str, Any]:
        """Run one action and return ``{"status", "error", "data"}``"""
        if not isinstance(request, Mapping):
            logger.warning("callDbAction :: Invalid request provided")
            return _response(STATUS_BAD_REQUEST, "Invalid request provided", None)

        action = request.get("action", request.get("actionName"))
        if isinstance(action, str):
            action = ACTION_ALIASES.get(action, action)
        if not isinstance(action, str) or action not in ACTIONS:
            message = f"Invalid actionName: {action}"
            logger.warning(f"callDbAction :: {message}")
            return _response(STATUS_BAD_REQUEST, message, None)

        who_am_i = f"jsondb :: {action}Action"
        failure_data = copy.copy(FAILURE_DATA[action])
        method_name, parse_args = ACTIONS[action]

        db_name = request.get("db_name", request.get("dbName"))
        if not isinstance(db_name, str) or not db_name:
            message = "Invalid dbName provided"
            logger.warning(f"{who_am_i} :: {message}")
            return _response(STATUS_BAD_REQUEST, message, failure_data)

        try:
            args = parse_args(request)
        except BadRequest as e:
            logger.warning(f"{who_am_i} :: {e}")
            return _response(STATUS_BAD_REQUEST, str(e), failure_data)

        try:
            collection = self.registry.get(db_name)
            data = getattr(collection, method_name)(*args)
        except JsonDBError as e:
            logger.error(f"{who_am_i} :: {e}")
            return _response(STATUS_ERROR, str(e), failure_data)
        except Exception as e:
            logger.exception(f"{who_am_i} :: unexpected failure")
            return _response(STATUS_ERROR, str(e), failure_data)

        if action == "save":
            data = 1

        return _response(STATUS_OK, None, data)


def call_db_action(registry: DatabaseRegistry, request: Any) -> Dict[str, Any]:
    """Run one request against ``registry``"""
    return DatabaseApi(registry).call(request)
