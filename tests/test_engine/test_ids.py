"""
Tests for document id generation.
"""

from unittest.mock import patch

from jsondb.engine import ids
from jsondb.engine.ids import ID_ALPHABET, ID_LENGTH, make_id, uid


class TestIds:
    """Random URL-safe ids."""

    def test_alphabet(self):
        assert len(ID_ALPHABET) == 64
        assert len(set(ID_ALPHABET)) == 64

    def test_uid_shape(self):
        doc_id = uid()
        assert len(doc_id) == ID_LENGTH
        assert all(ch in ID_ALPHABET for ch in doc_id)

    def test_uid_custom_length(self):
        assert len(uid(4)) == 4

    def test_ids_are_distinct(self):
        generated = {uid() for _ in range(1000)}
        assert len(generated) == 1000

    def test_make_id_retries_on_collision(self):
        existing = {"taken"}
        with patch.object(ids, "uid", side_effect=["taken", "fresh"]) as mocked:
            assert make_id(existing) == "fresh"
        assert mocked.call_count == 2
