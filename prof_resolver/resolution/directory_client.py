"""Ratings directory client.

Defines the DirectoryClient interface the resolution engine depends on and a
RateMyProfessors GraphQL implementation. The client never retries: transport,
HTTP and payload errors are raised as DirectoryUnavailable and the engine
turns them into an empty result for that tier.
"""

from typing import Any, Optional, Protocol

import httpx
from aiolimiter import AsyncLimiter
from pydantic import ValidationError

from prof_resolver.models.config import DirectoryConfig
from prof_resolver.models.directory import DirectoryRecord, School
from prof_resolver.utils.logger import get_logger


INSTRUCTOR_FIELDS = """
                id
                firstName
                lastName
                department
                school {
                  id
                  name
                }
                avgRating
                avgDifficulty
                numRatings
                wouldTakeAgainPercent
                legacyId
"""

SCHOOL_SEARCH_QUERY = """
query NewSearchSchools($query: SchoolSearchQuery!) {
  newSearch {
    schools(query: $query) {
      edges {
        node {
          id
          name
          legacyId
        }
      }
    }
  }
}
"""

SCOPED_INSTRUCTOR_SEARCH_QUERY = (
    """
query NewSearchTeachers($text: String!, $schoolID: ID!) {
  newSearch {
    teachers(query: {text: $text, schoolID: $schoolID}) {
      edges {
        node {"""
    + INSTRUCTOR_FIELDS
    + """        }
      }
    }
  }
}
"""
)

GLOBAL_INSTRUCTOR_SEARCH_QUERY = (
    """
query NewSearchTeachers($text: String!) {
  newSearch {
    teachers(query: {text: $text}) {
      edges {
        node {"""
    + INSTRUCTOR_FIELDS
    + """        }
      }
    }
  }
}
"""
)


class DirectoryUnavailable(Exception):
    """Raised when a directory call fails in transport or returns an unusable payload."""

    pass


class DirectoryClient(Protocol):
    """Collaborator interface used by the resolution engine.

    All methods may return empty results; none of them paginates.
    """

    async def search_school(self, name: str) -> Optional[School]: ...

    async def search_professor(
        self, name: str, school_id: str
    ) -> list[DirectoryRecord]: ...

    async def search_professor_global(self, name: str) -> list[DirectoryRecord]: ...


class RateMyProfessorsClient:
    """DirectoryClient over the RateMyProfessors GraphQL endpoint.

    Requests are throttled with an AsyncLimiter. Use as an async context
    manager, or call aclose() when done.

    Example:
        async with RateMyProfessorsClient(DirectoryConfig()) as client:
            school = await client.search_school("University of Washington")
    """

    def __init__(
        self,
        config: Optional[DirectoryConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        correlation_id: Optional[str] = None,
    ):
        self.config = config or DirectoryConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.config.request_timeout)
        self._limiter = AsyncLimiter(
            max_rate=self.config.max_requests_per_second, time_period=1.0
        )
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            phase="resolution",
            component="directory_client",
        )

    async def __aenter__(self) -> "RateMyProfessorsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _post(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST a GraphQL query and return its "data" object."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Basic {self.config.auth_token}",
        }
        await self._limiter.acquire()
        try:
            response = await self._http.post(
                self.config.graphql_url,
                json={"query": query, "variables": variables},
                headers=headers,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise DirectoryUnavailable(
                f"Directory returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DirectoryUnavailable(f"Directory request failed: {e}") from e
        except ValueError as e:
            raise DirectoryUnavailable(f"Directory returned invalid JSON: {e}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise DirectoryUnavailable(
                f"Directory response has no data: {str(payload)[:200]}"
            )
        return data

    @staticmethod
    def _edges(data: dict[str, Any], collection: str) -> list[dict[str, Any]]:
        try:
            edges = data["newSearch"][collection]["edges"]
        except (KeyError, TypeError) as e:
            raise DirectoryUnavailable(
                f"Unexpected directory payload shape for {collection}"
            ) from e
        if edges is None:
            return []
        if not isinstance(edges, list):
            raise DirectoryUnavailable(
                f"Unexpected directory payload shape for {collection}: edges is not a list"
            )
        return [
            edge["node"] for edge in edges if isinstance(edge, dict) and edge.get("node")
        ]

    def _parse_instructors(self, data: dict[str, Any]) -> list[DirectoryRecord]:
        records = []
        for node in self._edges(data, "teachers"):
            try:
                records.append(DirectoryRecord.model_validate(node))
            except ValidationError as e:
                self.logger.warning(
                    "Skipping malformed instructor node",
                    node_id=node.get("id") if isinstance(node, dict) else None,
                    error=str(e),
                )
        return records

    async def search_school(self, name: str) -> Optional[School]:
        """Return the directory's first school hit for a name, or None."""
        data = await self._post(SCHOOL_SEARCH_QUERY, {"query": {"text": name}})
        nodes = self._edges(data, "schools")
        if not nodes:
            self.logger.info("No school found", school_query=name)
            return None
        try:
            return School.model_validate(nodes[0])
        except ValidationError as e:
            raise DirectoryUnavailable(f"Malformed school node: {e}") from e

    async def search_professor(self, name: str, school_id: str) -> list[DirectoryRecord]:
        """Search instructors within one school."""
        data = await self._post(
            SCOPED_INSTRUCTOR_SEARCH_QUERY, {"text": name, "schoolID": school_id}
        )
        records = self._parse_instructors(data)
        self.logger.debug(
            "Scoped professor search", search_term=name, school_id=school_id, hits=len(records)
        )
        return records

    async def search_professor_global(self, name: str) -> list[DirectoryRecord]:
        """Search instructors across all schools."""
        data = await self._post(GLOBAL_INSTRUCTOR_SEARCH_QUERY, {"text": name})
        records = self._parse_instructors(data)
        self.logger.debug("Global professor search", search_term=name, hits=len(records))
        return records
