"""
Tests for document projection.
"""

from jsondb.engine.projection import project


DOC = {"_id": "1", "name": "foo", "val": 1, "tags": ["a"]}


class TestProjection:
    """Inclusive, exclusive and invalid projections."""

    def test_empty_projection_copies_everything(self):
        result = project(DOC, {})
        assert result == DOC
        result["tags"].append("b")
        assert DOC["tags"] == ["a"]

    def test_inclusive(self):
        assert project(DOC, {"name": 1, "val": True}) == {"name": "foo", "val": 1}

    def test_inclusive_skips_absent_fields(self):
        assert project(DOC, {"name": 1, "nope": 1}) == {"name": "foo"}

    def test_inclusive_id_only_when_listed(self):
        assert project(DOC, {"_id": 1}) == {"_id": "1"}

    def test_exclusive(self):
        assert project(DOC, {"tags": 0, "_id": False}) == {"name": "foo", "val": 1}

    def test_mixed_is_rejected(self, error_log):
        assert project(DOC, {"name": 1, "val": 0}) is None
        assert "projection :: The projection values are mixed" in error_log.text

    def test_non_object_is_rejected(self, error_log):
        assert project(DOC, ["name"]) is None
        assert "projection :: The projection is not an object" in error_log.text
