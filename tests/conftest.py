"""Shared fixtures: GtR payload factories and a fake HTTP transport."""

from typing import Callable, Optional, Union

import httpx
import pytest

from gtr_extractor.core.models import ApiConfig, CategoryConfig, ExtractorConfig

SEARCH_URL = "https://gtr.example.org/gtr/api/projects"
DETAIL_URL = "https://gtr.example.org/projects.json"


@pytest.fixture
def raw_project() -> Callable[..., dict]:
    """Factory for one project entry of a search envelope."""

    def make(
        reference: Optional[str] = "EP/L015234/1",
        grant_category: str = "Training Grant",
        status: str = "Active",
        title: str = "EPSRC Centre for Doctoral Training in Test Science",
        gtr_id: str = "A1B2C3D4-0000-0000-0000-000000000001",
        id_type: str = "RCUK",
    ) -> dict:
        identifiers = []
        if reference is not None:
            identifiers.append({"value": reference, "type": id_type})
        return {
            "id": gtr_id,
            "title": title,
            "status": status,
            "grantCategory": grant_category,
            "identifiers": {"identifier": identifiers},
        }

    return make


@pytest.fixture
def search_envelope() -> Callable[..., dict]:
    """Factory for a search response envelope."""

    def make(
        projects: list,
        total_pages: int = 1,
        page: int = 1,
        total_size: Optional[int] = None,
    ) -> dict:
        return {
            "links": {"link": []},
            "page": page,
            "size": len(projects),
            "totalPages": total_pages,
            "totalSize": total_size if total_size is not None else len(projects),
            "project": projects,
        }

    return make


@pytest.fixture
def detail_payload() -> Callable[..., dict]:
    """Factory for a projects.json?ref=... document."""

    def make(
        person_roles: Optional[list] = None,
        address: Optional[dict] = None,
        value_pounds=3960000,
    ) -> dict:
        if address is None:
            address = {
                "line1": "Oxford Road",
                "city": "Manchester",
                "postCode": "M13 9PL",
                "region": "North West",
            }
        if person_roles is None:
            person_roles = [
                {
                    "firstName": "Ada",
                    "otherNames": "M",
                    "surname": "Lovelace",
                    "role": [{"name": "TRAINING_GRANT_HOLDER"}],
                }
            ]
        return {
            "projectOverview": {
                "projectComposition": {
                    "project": {
                        "url": "https://gtr.ukri.org/projects?ref=EP/L015234/1",
                        "fund": {
                            "start": "2014-04-01",
                            "end": "2022-09-30",
                            "valuePounds": value_pounds,
                            "funder": {"name": "EPSRC"},
                        },
                    },
                    "leadResearchOrganisation": {
                        "name": "University of Manchester",
                        "department": "School of Physics",
                        "address": address,
                    },
                    "personRole": person_roles,
                }
            }
        }

    return make


Route = Union[dict, list, Exception, httpx.Response]


@pytest.fixture
def gtr_transport() -> Callable[..., httpx.MockTransport]:
    """
    Fake GtR server.

    search_pages maps a page number, or a (query term, page) tuple, to the
    search response; details maps a project reference to the detail response.
    A response is a JSON body, an exception to raise, or an httpx.Response.
    Every request is appended to the returned transport's `requests` list.
    """

    def make(
        search_pages: Optional[dict] = None,
        details: Optional[dict[str, Route]] = None,
    ) -> httpx.MockTransport:
        search_pages = search_pages or {}
        details = details or {}
        seen: list[httpx.Request] = []

        def respond(route: Optional[Route], request: httpx.Request) -> httpx.Response:
            if route is None:
                return httpx.Response(404, json={"error": "not found"})
            if isinstance(route, Exception):
                raise route
            if isinstance(route, httpx.Response):
                return route
            return httpx.Response(200, json=route)

        def search_route(request: httpx.Request) -> Optional[Route]:
            page = int(request.url.params.get("p", "1"))
            terms = request.url.params.get("q", "").split()
            for key, route in search_pages.items():
                # (term, page) keys route by a term of the query
                if isinstance(key, tuple):
                    term, key_page = key
                    if key_page == page and term in terms:
                        return route
                elif key == page:
                    return route
            return None

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            url = str(request.url)
            if url.startswith(SEARCH_URL):
                return respond(search_route(request), request)
            if url.startswith(DETAIL_URL):
                return respond(details.get(request.url.params.get("ref")), request)
            return httpx.Response(404)

        transport = httpx.MockTransport(handler)
        transport.requests = seen
        return transport

    return make


@pytest.fixture
def cdt_category() -> CategoryConfig:
    return CategoryConfig(
        label="CDT",
        search_terms=["cdt", "dtc", '"doctoral training centre"', '"centre for doctoral training"'],
        grant_category="Training Grant",
    )


@pytest.fixture
def dtp_category() -> CategoryConfig:
    return CategoryConfig(
        label="DTP",
        search_terms=["dtp", '"doctoral training partnership"'],
        grant_category="Training Grant",
    )


@pytest.fixture
def api_config() -> ApiConfig:
    return ApiConfig(search_url=SEARCH_URL, detail_url=DETAIL_URL, timeout=5.0)


@pytest.fixture
def extractor_config(api_config, cdt_category, dtp_category, tmp_path) -> ExtractorConfig:
    return ExtractorConfig(
        api=api_config,
        categories=[cdt_category, dtp_category],
        output_dir=str(tmp_path),
    )
