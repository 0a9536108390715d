"""
Document id generation
"""

import secrets
import string
from typing import Container

# 64 URL-safe symbols
ID_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits + "_-"
ID_LENGTH = 16


def uid(length: int = ID_LENGTH) -> str:
    """Generate a random URL-safe id of the given length"""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def make_id(existing: Container[str]) -> str:
    """Generate an id that is not already present in ``existing``"""
    while True:
        doc_id = uid(ID_LENGTH)
        if doc_id not in existing:
            return doc_id
