"""
Data models for the GtR extractor.

Remote payloads are converted into these dataclasses at the parsing
boundary (see core/payload.py); nothing downstream touches raw JSON.
"""

from dataclasses import dataclass, field, asdict, replace
from typing import Optional, Union

# Fixed CSV column order
CSV_COLUMNS = [
    "title",
    "funder",
    "type",
    "start",
    "end",
    "award_in_pounds",
    "lead_org",
    "lead_org_dept",
    "lead_org_address",
    "lead_org_postcode",
    "lead_org_region",
    "grant_holder_firstname",
    "grant_holder_othernames",
    "grant_holder_surname",
    "gtr_project_reference",
    "gtr_url",
]

Amount = Union[int, float]


@dataclass(frozen=True)
class RawProject:
    """One search hit as returned by the projects endpoint."""
    gtr_id: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    grant_category: Optional[str] = None
    identifiers: tuple[tuple[str, str], ...] = ()

    def identifier_of_type(self, id_type: str) -> Optional[str]:
        """Return the first identifier value tagged with id_type."""
        for tag, value in self.identifiers:
            if tag == id_type and value:
                return value
        return None


@dataclass(frozen=True)
class SearchResultPage:
    """Result envelope of one search request."""
    total_pages: Optional[int]
    total_size: Optional[int]
    page: int
    size: int
    projects: tuple[RawProject, ...] = ()


@dataclass(frozen=True)
class Investigator:
    """Training grant holder or principal investigator."""
    first_name: Optional[str] = None
    other_names: Optional[str] = None
    surname: Optional[str] = None


@dataclass(frozen=True)
class ProjectDetails:
    """Organisation, funding and personnel fields from the detail endpoint."""

    # Lead research organisation
    lead_org: Optional[str] = None
    lead_org_dept: Optional[str] = None
    lead_org_address: Optional[str] = None  # flattened, comma separated
    lead_org_postcode: Optional[str] = None
    lead_org_region: Optional[str] = None

    # Funding
    funder: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    award_in_pounds: Optional[Amount] = None

    gtr_url: Optional[str] = None
    investigator: Optional[Investigator] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ProjectRecord:
    """
    A doctoral training project.

    Created from a search hit with basic fields only; the detail stage
    produces an enriched copy via with_details().
    """

    reference: str  # RCUK project reference, e.g. "EP/L015234/1"
    title: Optional[str] = None
    gtr_id: Optional[str] = None
    category: str = ""  # "CDT" or "DTP"
    grant_category: Optional[str] = None

    details: Optional[ProjectDetails] = None

    def with_details(self, details: ProjectDetails) -> "ProjectRecord":
        """Return a copy carrying the given details."""
        return replace(self, details=details)

    @property
    def is_enriched(self) -> bool:
        return self.details is not None

    def to_row(self) -> dict[str, str]:
        """Render as a CSV row keyed by CSV_COLUMNS."""
        details = self.details or ProjectDetails()
        person = details.investigator or Investigator()

        values = {
            "title": self.title,
            "funder": details.funder,
            "type": self.category,
            "start": details.start,
            "end": details.end,
            "award_in_pounds": details.award_in_pounds,
            "lead_org": details.lead_org,
            "lead_org_dept": details.lead_org_dept,
            "lead_org_address": details.lead_org_address,
            "lead_org_postcode": details.lead_org_postcode,
            "lead_org_region": details.lead_org_region,
            "grant_holder_firstname": person.first_name,
            "grant_holder_othernames": person.other_names,
            "grant_holder_surname": person.surname,
            "gtr_project_reference": self.reference,
            "gtr_url": details.gtr_url,
        }
        return {col: "" if values[col] is None else str(values[col]) for col in CSV_COLUMNS}

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        data = {
            "reference": self.reference,
            "title": self.title,
            "gtr_id": self.gtr_id,
            "type": self.category,
            "grant_category": self.grant_category,
        }
        if self.details:
            data.update(self.details.to_dict())
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class CategoryConfig:
    """A project category to search for (CDT, DTP)."""
    label: str
    search_terms: list[str]
    grant_category: str = "Training Grant"


@dataclass
class ApiConfig:
    """GtR endpoints and request settings."""
    search_url: str = "https://gtr.ukri.org/gtr/api/projects"
    detail_url: str = "https://gtr.ukri.org/projects.json"
    accept_header: str = "application/vnd.rcuk.gtr.json-v5"
    page_size: int = 100  # API default 20, max 100
    timeout: float = 30.0


@dataclass
class ExtractorConfig:
    """Full run configuration."""
    api: ApiConfig = field(default_factory=ApiConfig)
    categories: list[CategoryConfig] = field(default_factory=list)
    identifier_type: str = "RCUK"
    closed_status: str = "Closed"
    investigator_roles: list[str] = field(
        default_factory=lambda: ["TRAINING_GRANT_HOLDER", "PRINCIPAL_INVESTIGATOR"]
    )
    detail_concurrency: int = 1
    output_dir: str = "."
