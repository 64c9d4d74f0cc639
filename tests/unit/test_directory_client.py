"""Unit tests for the RateMyProfessors GraphQL client."""

import json

import httpx
import pytest

from prof_resolver.models.config import DirectoryConfig
from prof_resolver.resolution.directory_client import (
    GLOBAL_INSTRUCTOR_SEARCH_QUERY,
    SCHOOL_SEARCH_QUERY,
    SCOPED_INSTRUCTOR_SEARCH_QUERY,
    DirectoryUnavailable,
    RateMyProfessorsClient,
)


INSTRUCTOR_NODE = {
    "id": "VGVhY2hlci0xMjM0",
    "firstName": "Stuart",
    "lastName": "Reges",
    "department": "Computer Science",
    "school": {"id": "U2Nob29sLTE1MzA=", "name": "University of Washington"},
    "avgRating": 4.2,
    "avgDifficulty": 3.1,
    "numRatings": 310,
    "wouldTakeAgainPercent": 87.5,
    "legacyId": 1234,
}


def instructors_payload(*nodes):
    return {"data": {"newSearch": {"teachers": {"edges": [{"node": n} for n in nodes]}}}}


def make_client(handler, requests=None):
    """Client wired to a MockTransport that records every request."""

    def recording_handler(request):
        if requests is not None:
            requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return RateMyProfessorsClient(DirectoryConfig(max_requests_per_second=100), http_client=http)


class TestSearchSchool:
    @pytest.mark.asyncio
    async def test_returns_first_school(self):
        # Arrange
        requests = []
        payload = {
            "data": {
                "newSearch": {
                    "schools": {
                        "edges": [
                            {"node": {"id": "U1", "name": "University of Washington", "legacyId": 1530}},
                            {"node": {"id": "U2", "name": "University of Washington Tacoma"}},
                        ]
                    }
                }
            }
        }
        client = make_client(lambda r: httpx.Response(200, json=payload), requests)

        # Act
        school = await client.search_school("University of Washington")

        # Assert
        assert school.id == "U1"
        assert school.external_id == 1530
        body = json.loads(requests[0].content)
        assert body["query"] == SCHOOL_SEARCH_QUERY
        assert body["variables"] == {"query": {"text": "University of Washington"}}
        assert requests[0].headers["Authorization"] == "Basic dGVzdDp0ZXN0"

    @pytest.mark.asyncio
    async def test_no_school_returns_none(self):
        payload = {"data": {"newSearch": {"schools": {"edges": []}}}}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        assert await client.search_school("Nowhere College") is None


class TestSearchProfessor:
    @pytest.mark.asyncio
    async def test_scoped_search_parses_records(self):
        requests = []
        client = make_client(
            lambda r: httpx.Response(200, json=instructors_payload(INSTRUCTOR_NODE)), requests
        )

        records = await client.search_professor("Reges", "U2Nob29sLTE1MzA=")

        assert len(records) == 1
        assert records[0].full_name == "Stuart Reges"
        assert records[0].school.name == "University of Washington"
        assert records[0].profile_url() == "https://www.ratemyprofessors.com/professor/1234"
        body = json.loads(requests[0].content)
        assert body["query"] == SCOPED_INSTRUCTOR_SEARCH_QUERY
        assert body["variables"] == {"text": "Reges", "schoolID": "U2Nob29sLTE1MzA="}

    @pytest.mark.asyncio
    async def test_global_search_has_no_school_scope(self):
        requests = []
        client = make_client(
            lambda r: httpx.Response(200, json=instructors_payload(INSTRUCTOR_NODE)), requests
        )

        await client.search_professor_global("Reges")

        body = json.loads(requests[0].content)
        assert body["query"] == GLOBAL_INSTRUCTOR_SEARCH_QUERY
        assert body["variables"] == {"text": "Reges"}

    @pytest.mark.asyncio
    async def test_malformed_nodes_skipped(self):
        """A node without an id is dropped; null text fields become empty."""
        bad = {"firstName": "No", "lastName": "Id"}
        sparse = {"id": "T2", "firstName": None, "lastName": "Reges", "department": None}
        client = make_client(lambda r: httpx.Response(200, json=instructors_payload(bad, sparse)))

        records = await client.search_professor_global("Reges")

        assert [r.id for r in records] == ["T2"]
        assert records[0].first_name == ""
        assert records[0].department == ""


class TestFailures:
    """Every failure surfaces as DirectoryUnavailable, with no retry."""

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        requests = []
        client = make_client(lambda r: httpx.Response(503), requests)

        with pytest.raises(DirectoryUnavailable, match="HTTP 503"):
            await client.search_professor("Reges", "U1")
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(DirectoryUnavailable):
            await client.search_school("University of Washington")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = make_client(lambda r: httpx.Response(200, content=b"<html>nope</html>"))

        with pytest.raises(DirectoryUnavailable, match="invalid JSON"):
            await client.search_professor_global("Reges")

    @pytest.mark.asyncio
    async def test_graphql_errors_without_data(self):
        payload = {"errors": [{"message": "Unauthorized"}]}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        with pytest.raises(DirectoryUnavailable, match="no data"):
            await client.search_professor_global("Reges")

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        payload = {"data": {"newSearch": None}}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        with pytest.raises(DirectoryUnavailable, match="payload shape"):
            await client.search_professor_global("Reges")

    @pytest.mark.asyncio
    async def test_edges_not_a_list(self):
        payload = {"data": {"newSearch": {"teachers": {"edges": {"x": 1}}}}}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        with pytest.raises(DirectoryUnavailable, match="not a list"):
            await client.search_professor("Reges", "U1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "edges",
        [["garbage"], [{"node": "garbage"}], [None, 7, {"node": ["T1"]}]],
    )
    async def test_non_object_edges_and_nodes_skipped(self, edges):
        """Edges or nodes that are not objects are dropped, not raised."""
        payload = {"data": {"newSearch": {"teachers": {"edges": edges}}}}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        records = await client.search_professor_global("Reges")

        assert records == []

    @pytest.mark.asyncio
    async def test_non_object_edges_do_not_hide_good_nodes(self):
        payload = instructors_payload(INSTRUCTOR_NODE)
        payload["data"]["newSearch"]["teachers"]["edges"][:0] = ["garbage", {"node": "garbage"}]
        client = make_client(lambda r: httpx.Response(200, json=payload))

        records = await client.search_professor("Reges", "U1")

        assert [r.id for r in records] == [INSTRUCTOR_NODE["id"]]

    @pytest.mark.asyncio
    async def test_school_node_not_an_object(self):
        payload = {"data": {"newSearch": {"schools": {"edges": [{"node": "garbage"}]}}}}
        client = make_client(lambda r: httpx.Response(200, json=payload))

        with pytest.raises(DirectoryUnavailable, match="Malformed school node"):
            await client.search_school("University of Washington")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        async with RateMyProfessorsClient(http_client=http):
            pass

        assert http.is_closed is False
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = RateMyProfessorsClient()

        await client.aclose()

        assert client._http.is_closed is True
