"""Tests for ProjectCollection."""

import pytest

from gtr_extractor.core.collection import ProjectCollection
from gtr_extractor.core.models import ProjectDetails, ProjectRecord


class TestProjectCollection:
    """Tests for ProjectCollection."""

    def test_add_new(self):
        """Test adding a new reference."""
        projects = ProjectCollection("CDT")

        assert projects.add(ProjectRecord(reference="A", title="One")) is True
        assert len(projects) == 1
        assert "A" in projects

    def test_add_overwrites_same_reference(self):
        """Test a later record with the same reference replaces the earlier."""
        projects = ProjectCollection("CDT")
        projects.add(ProjectRecord(reference="A", title="Old"))

        assert projects.add(ProjectRecord(reference="A", title="New")) is False
        assert len(projects) == 1
        assert projects.get("A").title == "New"

    def test_merge(self):
        """Test merging keeps records from both collections."""
        first = ProjectCollection("CDT")
        first.add(ProjectRecord(reference="A", title="A1"))
        first.add(ProjectRecord(reference="B"))

        second = ProjectCollection("CDT")
        second.add(ProjectRecord(reference="A", title="A2"))
        second.add(ProjectRecord(reference="C"))

        first.merge(second)

        assert sorted(first.references()) == ["A", "B", "C"]
        assert first.get("A").title == "A2"

    def test_replace(self):
        """Test replacing a held record with an enriched copy."""
        projects = ProjectCollection("DTP")
        record = ProjectRecord(reference="A")
        projects.add(record)

        projects.replace(record.with_details(ProjectDetails(funder="ESRC")))

        assert projects.get("A").details.funder == "ESRC"

    def test_replace_unknown_reference(self):
        projects = ProjectCollection("DTP")
        with pytest.raises(KeyError):
            projects.replace(ProjectRecord(reference="missing"))

    def test_iteration_snapshot(self):
        """Test records can be replaced while iterating."""
        projects = ProjectCollection("CDT")
        for ref in ("A", "B"):
            projects.add(ProjectRecord(reference=ref))

        for record in projects:
            projects.replace(record.with_details(ProjectDetails()))

        assert all(r.is_enriched for r in projects)

    def test_get_missing(self):
        assert ProjectCollection().get("nope") is None
