# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Unit tests for the Elasticsearch client."""

from unittest.mock import MagicMock

import httpx
import orjson
import pytest

from esclient.configs import settings
from esclient.elastic.client import ElasticClient
from esclient.elastic.protocol import Outcome
from esclient.elastic.transport import HttpTransport
from esclient.elastic.utils import document_size
from esclient.exceptions import EndpointError, InvalidIndexNameError
from tests.unit.elastic.endpoint import RecordingEndpoint

MAPPING = {"field1": "text", "field2": "long", "field3": "date"}


@pytest.fixture(name="client")
def fixture_client(transport: HttpTransport) -> ElasticClient:
    """Return an ElasticClient talking to the recording endpoint."""
    return ElasticClient("es.test", 9200, transport=transport)


def test_client_defaults_to_configured_bulk_limit(transport: HttpTransport) -> None:
    """Test that the bulk limit comes from the settings unless overridden."""
    assert ElasticClient("es.test", 9200, transport=transport).max_bulk_bytes == (
        settings.bulk.max_bytes
    )
    assert ElasticClient("es.test", 9200, max_bulk_bytes=10, transport=transport).max_bulk_bytes == 10


@pytest.mark.parametrize("max_bulk_bytes", [0, -1])
def test_client_rejects_non_positive_bulk_limit(
    transport: HttpTransport, max_bulk_bytes: int
) -> None:
    """Test that an explicit zero or negative bulk limit is refused, not replaced."""
    with pytest.raises(ValueError, match="max_bulk_bytes must be positive"):
        ElasticClient("es.test", 9200, max_bulk_bytes=max_bulk_bytes, transport=transport)


def test_client_builds_transport_from_host() -> None:
    """Test that the base URL is assembled from scheme, host and port."""
    client = ElasticClient("192.168.0.200", 9200, "https")

    assert client.transport.base_url == "https://192.168.0.200:9200"


def test_create_index_with_mapping(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that the index is created with a PUT carrying the mapping."""
    assert client.create_index("company-test-04", MAPPING) is True

    (request,) = endpoint.requests
    assert request.method == "PUT"
    assert request.url.path == "/company-test-04"
    assert request.headers["content-type"] == "application/json"
    assert orjson.loads(request.content) == {
        "mappings": {"properties": {name: {"type": kind} for name, kind in MAPPING.items()}}
    }


def test_create_index_without_mapping(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that an empty index is created with no body."""
    assert client.create_index("empty-index") is True

    (request,) = endpoint.requests
    assert request.method == "PUT"
    assert request.content == b""


def test_create_index_rejected(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that an unsuccessful status is reported as False."""
    endpoint.responses = [httpx.Response(400)]

    assert client.create_index("company-test-04", MAPPING) is False


def test_create_index_invalid_name(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that a bad name raises before any request is made."""
    with pytest.raises(InvalidIndexNameError) as exc_info:
        client.create_index("Bad Name!", MAPPING)

    assert exc_info.value.args[0] == "Invalid index name: Bad Name!"
    assert isinstance(exc_info.value, ValueError)
    assert endpoint.requests == []


def test_create_index_transport_failure(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that a network failure propagates from the blocking call."""
    endpoint.responses = [httpx.ConnectError("connection refused")]

    with pytest.raises(httpx.ConnectError):
        client.create_index("company-test-04", MAPPING)


@pytest.mark.parametrize(
    ["status_code", "expected"],
    [(200, True), (404, False), (403, False)],
    ids=["exists", "missing", "forbidden"],
)
def test_index_exists(
    client: ElasticClient, endpoint: RecordingEndpoint, status_code: int, expected: bool
) -> None:
    """Test that a HEAD request decides whether the index exists."""
    endpoint.responses = [httpx.Response(status_code)]

    assert client.index_exists("company-test-04") is expected
    (request,) = endpoint.requests
    assert request.method == "HEAD"
    assert request.url.path == "/company-test-04"


def test_index_exists_server_error(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that a server error is raised instead of being read as missing."""
    endpoint.responses = [httpx.Response(503)]

    with pytest.raises(EndpointError) as exc_info:
        client.index_exists("company-test-04")

    assert exc_info.value.status_code == 503


def test_get_mapping(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that the mapping is fetched and decoded."""
    body = {"company-test-04": {"mappings": {"properties": {"field1": {"type": "text"}}}}}
    endpoint.responses = [httpx.Response(200, json=body)]

    assert client.get_mapping("company-test-04") == body
    assert endpoint.requests[0].url.path == "/company-test-04/_mapping"


def test_get_mapping_missing_index(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that a missing index raises EndpointError."""
    endpoint.responses = [httpx.Response(404)]

    with pytest.raises(EndpointError):
        client.get_mapping("missing")


@pytest.mark.parametrize(
    ["doc_id", "method", "path"],
    [(None, "POST", "/idx/_doc"), ("42", "PUT", "/idx/_doc/42")],
    ids=["generated_id", "given_id"],
)
def test_index_document(
    client: ElasticClient,
    endpoint: RecordingEndpoint,
    doc_id: str | None,
    method: str,
    path: str,
) -> None:
    """Test that a single document is sent to the document endpoint."""
    assert client.index_document("idx", {"field1": "hello", "field2": 2}, doc_id) is True

    (request,) = endpoint.requests
    assert request.method == method
    assert request.url.path == path
    assert orjson.loads(request.content) == {"field1": "hello", "field2": 2}


def test_bulk_index_splits_by_size(transport: HttpTransport, endpoint: RecordingEndpoint) -> None:
    """Test that bulk indexing sends one request per size-bounded batch."""
    documents = [{"a": 1}, {"a": 2}, {"a": 3}]
    max_bytes = document_size({"a": 1}) + document_size({"a": 2})
    client = ElasticClient("es.test", 9200, max_bulk_bytes=max_bytes, transport=transport)

    outcome = client.bulk_index("idx", documents)

    assert outcome == Outcome.ok(batches_succeeded=2)
    assert len(endpoint.requests) == 2
    assert all(request.url.path == "/idx/_bulk" for request in endpoint.requests)


def test_bulk_index_invalid_name(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that blocking bulk indexing raises on a bad name."""
    with pytest.raises(InvalidIndexNameError):
        client.bulk_index("bad:name", [{"a": 1}])

    assert endpoint.requests == []


def test_bulk_index_failure(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that a rejected bulk request is reported through the outcome."""
    endpoint.responses = [httpx.Response(413)]

    outcome = client.bulk_index("idx", [{"a": 1}])

    assert not outcome
    assert isinstance(outcome.error, EndpointError)


def test_close_releases_client(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that closing the client closes the blocking HTTP client."""
    client.index_exists("idx")
    http_client = client.transport.get_client()

    with client:
        pass

    assert http_client.is_closed


@pytest.mark.asyncio
async def test_acreate_index(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test that the async creation reports success and calls back once."""
    callback = MagicMock()

    outcome = await client.acreate_index("company-test-04", MAPPING, callback)

    assert outcome == Outcome.ok()
    callback.assert_called_once_with(outcome)
    assert endpoint.requests[0].method == "PUT"


@pytest.mark.asyncio
async def test_acreate_index_invalid_name(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that a bad name fails the outcome without raising or sending anything."""
    callback = MagicMock()

    outcome = await client.acreate_index("Bad Name!", MAPPING, callback)

    assert not outcome
    assert isinstance(outcome.error, InvalidIndexNameError)
    assert endpoint.requests == []
    callback.assert_called_once_with(outcome)


@pytest.mark.asyncio
async def test_acreate_index_endpoint_failure(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that an unsuccessful status lands in the failure slot."""
    endpoint.responses = [httpx.Response(400)]

    outcome = await client.acreate_index("company-test-04", MAPPING)

    assert isinstance(outcome.error, EndpointError)
    assert outcome.error.status_code == 400


@pytest.mark.asyncio
async def test_acreate_index_transport_failure(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that a network failure lands in the same failure slot."""
    failure = httpx.ConnectError("connection refused")
    endpoint.responses = [failure]
    callback = MagicMock()

    outcome = await client.acreate_index("company-test-04", MAPPING, callback)

    assert outcome.error is failure
    callback.assert_called_once_with(outcome)


@pytest.mark.asyncio
async def test_aindex_exists(client: ElasticClient, endpoint: RecordingEndpoint) -> None:
    """Test the async existence check."""
    endpoint.responses = [httpx.Response(200), httpx.Response(404), httpx.Response(500)]

    assert await client.aindex_exists("idx") is True
    assert await client.aindex_exists("idx") is False
    with pytest.raises(EndpointError):
        await client.aindex_exists("idx")


@pytest.mark.asyncio
async def test_aget_mapping_and_aindex_document(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test the async mapping fetch and single document indexing."""
    endpoint.responses = [httpx.Response(200, json={"idx": {"mappings": {}}})]

    assert await client.aget_mapping("idx") == {"idx": {"mappings": {}}}
    assert await client.aindex_document("idx", {"a": 1}) is True
    assert [request.method for request in endpoint.requests] == ["GET", "POST"]


@pytest.mark.asyncio
async def test_abulk_index(transport: HttpTransport, endpoint: RecordingEndpoint) -> None:
    """Test that async bulk indexing stops at the first failing batch."""
    endpoint.responses = [httpx.Response(200), httpx.Response(500)]
    client = ElasticClient("es.test", 9200, max_bulk_bytes=1, transport=transport)
    callback = MagicMock()

    outcome = await client.abulk_index("idx", [{"a": 1}, {"a": 2}, {"a": 3}], callback)

    assert not outcome
    assert outcome.batches_succeeded == 1
    assert len(endpoint.requests) == 2
    callback.assert_called_once_with(outcome)


@pytest.mark.asyncio
async def test_abulk_index_invalid_name(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that async bulk indexing reports a bad name through the outcome."""
    callback = MagicMock()

    outcome = await client.abulk_index("-bad", [{"a": 1}], callback)

    assert isinstance(outcome.error, InvalidIndexNameError)
    assert endpoint.requests == []
    callback.assert_called_once_with(outcome)


@pytest.mark.asyncio
async def test_async_context_manager_closes_clients(client: ElasticClient) -> None:
    """Test that leaving the async context closes both HTTP clients."""
    async with client:
        await client.aindex_exists("idx")
        client.index_exists("idx")

    assert client.transport._client is None
    assert client.transport._async_client is None


@pytest.mark.asyncio
async def test_acreate_index_unroutable_name(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that a name with a control character fails the outcome and calls back."""
    callback = MagicMock()

    outcome = await client.acreate_index("a\tb", MAPPING, callback)

    assert not outcome
    assert isinstance(outcome.error, httpx.InvalidURL)
    assert endpoint.requests == []
    callback.assert_called_once_with(outcome)


@pytest.mark.asyncio
async def test_abulk_index_unroutable_name(
    client: ElasticClient, endpoint: RecordingEndpoint
) -> None:
    """Test that async bulk indexing reports a URL building failure through the callback."""
    callback = MagicMock()

    outcome = await client.abulk_index("a\nb", [{"a": 1}], callback)

    assert not outcome
    assert isinstance(outcome.error, httpx.InvalidURL)
    assert endpoint.requests == []
    callback.assert_called_once_with(outcome)
