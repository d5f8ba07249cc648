"""
Parsers for GtR JSON payloads.

Converts search envelopes and project detail documents into typed
models. Absent or null paths become None; only a missing top-level
envelope is treated as an error.
"""

from typing import Any, Iterable, Optional

from .errors import PayloadError
from .models import (
    Amount,
    Investigator,
    ProjectDetails,
    RawProject,
    SearchResultPage,
)


def get_path(data: Any, *keys: str) -> Any:
    """
    Walk nested dicts, returning None as soon as a key is missing.

    Args:
        data: Decoded JSON value
        *keys: Successive dict keys

    Returns:
        Value at the path or None
    """
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def as_text(value: Any) -> Optional[str]:
    """Scalar to string, None for null/containers."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, str):
        return value
    return str(value)


def as_amount(value: Any) -> Optional[Amount]:
    """Award value as int/float; numeric strings are converted."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return None
    return None


def as_list(value: Any) -> list:
    """Wrap a lone dict in a list; anything else non-list becomes []."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"Invalid {name!r} in search envelope: {value!r}") from e


def _int_or(value: Any, default: Optional[int]) -> Optional[int]:
    """Lenient int for informational envelope fields."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_raw_project(data: dict) -> RawProject:
    """
    Parse one element of the search envelope's project list.

    Args:
        data: Project dict from the search response

    Returns:
        RawProject
    """
    identifiers = []
    for item in as_list(get_path(data, "identifiers", "identifier")):
        if not isinstance(item, dict):
            continue
        tag = as_text(item.get("type"))
        value = as_text(item.get("value"))
        if tag and value:
            identifiers.append((tag, value))

    return RawProject(
        gtr_id=as_text(data.get("id")),
        title=as_text(data.get("title")),
        status=as_text(data.get("status")),
        grant_category=as_text(data.get("grantCategory")),
        identifiers=tuple(identifiers),
    )


def parse_search_page(data: Any, require_total_pages: bool = True) -> SearchResultPage:
    """
    Parse a search response envelope.

    Only the page count of the first response drives pagination, so
    totalPages is checked only when require_total_pages is set. The
    other envelope fields are informational: a missing or malformed
    value falls back instead of failing the page.

    Args:
        data: Decoded JSON body of a projects search
        require_total_pages: Reject envelopes without a valid totalPages

    Returns:
        SearchResultPage

    Raises:
        PayloadError: If the body is not an object, or totalPages is
            required and missing or invalid
    """
    if not isinstance(data, dict):
        raise PayloadError("Search response is not a JSON object")

    if require_total_pages:
        if data.get("totalPages") is None:
            raise PayloadError("Search response has no 'totalPages'")
        total_pages = _as_int(data["totalPages"], "totalPages")
    else:
        total_pages = _int_or(data.get("totalPages"), None)

    projects = tuple(
        parse_raw_project(p) for p in as_list(data.get("project")) if isinstance(p, dict)
    )

    return SearchResultPage(
        total_pages=total_pages,
        total_size=_int_or(data.get("totalSize"), None),
        page=_int_or(data.get("page"), 1),
        size=_int_or(data.get("size"), len(projects)),
        projects=projects,
    )


def flatten_address(address: Any) -> str:
    """
    Join address sub-field values into a single display string.

    Values keep the order in which the payload declares them; null
    values are skipped.

    Example:
        {"line1": "Oxford Road", "city": "Manchester", "postCode": "M13 9PL"}
        -> "Oxford Road, Manchester, M13 9PL"
    """
    if not isinstance(address, dict):
        return ""
    parts = [as_text(v) for v in address.values()]
    return ", ".join(p for p in parts if p is not None)


def find_investigator(
    person_roles: Iterable[Any],
    role_names: Iterable[str],
) -> Optional[Investigator]:
    """
    Pick the first person holding one of role_names.

    Args:
        person_roles: personRole list from the detail payload
        role_names: Accepted role tags, e.g. PRINCIPAL_INVESTIGATOR

    Returns:
        Investigator or None if nobody matches
    """
    wanted = set(role_names)
    for person in person_roles:
        if not isinstance(person, dict):
            continue
        roles = as_list(person.get("role"))
        if any(isinstance(r, dict) and r.get("name") in wanted for r in roles):
            return Investigator(
                first_name=as_text(person.get("firstName")),
                other_names=as_text(person.get("otherNames")),
                surname=as_text(person.get("surname")),
            )
    return None


def parse_project_details(
    data: Any,
    investigator_roles: Iterable[str] = ("TRAINING_GRANT_HOLDER", "PRINCIPAL_INVESTIGATOR"),
) -> ProjectDetails:
    """
    Parse a project detail document.

    Args:
        data: Decoded JSON body of projects.json?ref=...
        investigator_roles: Role tags identifying the grant holder

    Returns:
        ProjectDetails

    Raises:
        PayloadError: If projectOverview.projectComposition is absent
    """
    composition = get_path(data, "projectOverview", "projectComposition")
    if not isinstance(composition, dict):
        raise PayloadError("Detail response has no 'projectOverview.projectComposition'")

    org = composition.get("leadResearchOrganisation") or {}
    address = get_path(org, "address")
    fund = get_path(composition, "project", "fund") or {}

    return ProjectDetails(
        lead_org=as_text(get_path(org, "name")),
        lead_org_dept=as_text(get_path(org, "department")),
        lead_org_address=flatten_address(address) if isinstance(address, dict) else None,
        lead_org_postcode=as_text(get_path(address, "postCode")),
        lead_org_region=as_text(get_path(address, "region")),
        funder=as_text(get_path(fund, "funder", "name")),
        start=as_text(get_path(fund, "start")),
        end=as_text(get_path(fund, "end")),
        award_in_pounds=as_amount(get_path(fund, "valuePounds")),
        gtr_url=as_text(get_path(composition, "project", "url")),
        investigator=find_investigator(
            as_list(composition.get("personRole")),
            investigator_roles,
        ),
    )
