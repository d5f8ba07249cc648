"""Tests for core models."""

import dataclasses

import pytest

from gtr_extractor.core.models import (
    CSV_COLUMNS,
    Investigator,
    ProjectDetails,
    ProjectRecord,
    RawProject,
)


@pytest.fixture
def details():
    return ProjectDetails(
        lead_org="University of Manchester",
        lead_org_dept="School of Physics",
        lead_org_address="Oxford Road, Manchester, M13 9PL",
        lead_org_postcode="M13 9PL",
        lead_org_region="North West",
        funder="EPSRC",
        start="2014-04-01",
        end="2022-09-30",
        award_in_pounds=3960000,
        gtr_url="https://gtr.ukri.org/projects?ref=EP/L015234/1",
        investigator=Investigator(first_name="Ada", other_names="M", surname="Lovelace"),
    )


class TestRawProject:
    """Tests for RawProject.identifier_of_type."""

    def test_finds_matching_type(self):
        """Test the value tagged with the requested type is returned."""
        project = RawProject(identifiers=(("GTR", "123"), ("RCUK", "EP/X/1")))
        assert project.identifier_of_type("RCUK") == "EP/X/1"

    def test_missing_type(self):
        """Test None when no identifier has the type."""
        project = RawProject(identifiers=(("GTR", "123"),))
        assert project.identifier_of_type("RCUK") is None

    def test_first_match_wins(self):
        """Test the first of several matching identifiers is used."""
        project = RawProject(identifiers=(("RCUK", "A"), ("RCUK", "B")))
        assert project.identifier_of_type("RCUK") == "A"


class TestProjectRecord:
    """Tests for ProjectRecord."""

    def test_basic_record(self):
        """Test record with search fields only."""
        record = ProjectRecord(reference="EP/L015234/1", title="CDT", category="CDT")

        assert record.details is None
        assert record.is_enriched is False

    def test_record_is_immutable(self):
        """Test records cannot be mutated."""
        record = ProjectRecord(reference="EP/L015234/1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.title = "changed"

    def test_with_details_returns_new_record(self, details):
        """Test with_details leaves the original untouched."""
        record = ProjectRecord(reference="EP/L015234/1", title="CDT", category="CDT")
        enriched = record.with_details(details)

        assert enriched is not record
        assert record.details is None
        assert enriched.details == details
        assert enriched.title == "CDT"
        assert enriched.is_enriched is True

    def test_with_details_is_idempotent(self, details):
        """Test applying the same details twice gives an equal record."""
        record = ProjectRecord(reference="EP/L015234/1", title="CDT", category="CDT")

        once = record.with_details(details)
        twice = once.with_details(details)

        assert once == twice

    def test_to_row_column_order(self, details):
        """Test row keys follow the fixed CSV column order."""
        row = ProjectRecord(reference="EP/L015234/1").with_details(details).to_row()
        assert list(row) == CSV_COLUMNS

    def test_to_row_values(self, details):
        """Test row values of an enriched record."""
        record = ProjectRecord(
            reference="EP/L015234/1",
            title="EPSRC CDT in Test Science",
            category="CDT",
        ).with_details(details)

        row = record.to_row()

        assert row["title"] == "EPSRC CDT in Test Science"
        assert row["type"] == "CDT"
        assert row["award_in_pounds"] == "3960000"
        assert row["lead_org_address"] == "Oxford Road, Manchester, M13 9PL"
        assert row["grant_holder_surname"] == "Lovelace"
        assert row["gtr_project_reference"] == "EP/L015234/1"

    def test_to_row_missing_values_are_empty(self):
        """Test an unenriched record renders detail columns empty."""
        row = ProjectRecord(reference="EP/L015234/1", category="DTP").to_row()

        assert row["type"] == "DTP"
        assert row["funder"] == ""
        assert row["grant_holder_firstname"] == ""
        assert row["gtr_url"] == ""

    def test_to_dict_excludes_none(self, details):
        """Test to_dict drops empty fields and flattens details."""
        record = ProjectRecord(reference="EP/L015234/1", category="CDT")
        data = record.with_details(details).to_dict()

        assert "title" not in data
        assert data["reference"] == "EP/L015234/1"
        assert data["funder"] == "EPSRC"
        assert data["investigator"]["surname"] == "Lovelace"
