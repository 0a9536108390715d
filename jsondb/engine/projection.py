"""
Document projection
"""

import logging
from typing import Any, Optional

from .values import Document, deep_copy

logger = logging.getLogger(__name__)


def project(document: Document, projection: Any) -> Optional[Document]:
    """Return a detached copy of ``document`` filtered by ``projection``.

    The projection is either inclusive (all values truthy) or exclusive (all
    values falsy). An empty projection returns the whole document, ``_id``
    included. Inclusive projections do not add ``_id`` unless it is listed.

    Returns None for a projection that is not a dict or that mixes inclusive
    and exclusive values.
    """
    if not isinstance(projection, dict):
        logger.error(f"projection :: The projection is not an object. Given: {projection!r}")
        return None

    if not projection:
        return deep_copy(document)

    inclusive_count = sum(1 for flag in projection.values() if flag)
    if 0 < inclusive_count < len(projection):
        logger.error(f"projection :: The projection values are mixed. Given: {projection!r}")
        return None

    if inclusive_count:
        return {
            field: deep_copy(document[field])
            for field in projection
            if field in document
        }

    return {
        field: deep_copy(value)
        for field, value in document.items()
        if field not in projection
    }
