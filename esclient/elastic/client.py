"""A client for an Elasticsearch compatible document store.

Every network operation comes in a blocking flavor (`create_index`) and a
non-blocking one (`acreate_index`) sharing the same `HttpTransport`.
"""

import logging
from typing import Any, Sequence, cast

import orjson
from httpx import HTTPError, InvalidURL, Response

from esclient.configs import settings
from esclient.elastic.protocol import (
    Document,
    FieldMapping,
    Outcome,
    OutcomeCallback,
)
from esclient.elastic.submitter import BatchSubmitter
from esclient.elastic.transport import HttpTransport
from esclient.elastic.utils import (
    generate_mapping,
    is_index_name_valid,
    serialize_document,
    split_documents,
)
from esclient.exceptions import EndpointError, InvalidIndexNameError

logger = logging.getLogger(__name__)


class ElasticClient:
    """Create and inspect indices, and index documents one by one or in bulk.

    Blocking calls raise `InvalidIndexNameError` for a bad name before touching
    the network and return a boolean for request-level results. The outcome
    based non-blocking calls (`acreate_index`, `abulk_index`) never raise: every
    failure ends up in the returned `Outcome` and the optional callback.
    """

    transport: HttpTransport
    max_bulk_bytes: int

    def __init__(
        self,
        host: str,
        port: int,
        scheme: str = "http",
        *,
        max_bulk_bytes: int | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        self.transport = transport or HttpTransport(
            host=host,
            port=port,
            scheme=scheme,
            connect_timeout=settings.elasticsearch.connect_timeout_sec,
            request_timeout=settings.elasticsearch.request_timeout_sec,
        )
        self.max_bulk_bytes = (
            settings.bulk.max_bytes if max_bulk_bytes is None else max_bulk_bytes
        )
        if self.max_bulk_bytes <= 0:
            raise ValueError(f"max_bulk_bytes must be positive, got {self.max_bulk_bytes}")
        self.submitter = BatchSubmitter(self.transport)

    @classmethod
    def from_settings(cls) -> "ElasticClient":
        """Build a client for the endpoint configured in the settings."""
        return cls(
            settings.elasticsearch.host,
            settings.elasticsearch.port,
            settings.elasticsearch.scheme,
        )

    def __enter__(self) -> "ElasticClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "ElasticClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def create_index(self, name: str, mapping: FieldMapping | None = None) -> bool:
        """Create the index `name`, declaring field types from `mapping`.

        Without a mapping, an empty index is created.
        """
        self._validate(name)
        response = self.transport.request("PUT", f"/{name}", self._mapping_body(mapping))
        self._log_response("Create index", name, response)
        return response.is_success

    async def acreate_index(
        self,
        name: str,
        mapping: FieldMapping | None = None,
        callback: OutcomeCallback | None = None,
    ) -> Outcome:
        """Create the index `name` without blocking. See `create_index`."""
        if not is_index_name_valid(name):
            outcome = Outcome.failure(InvalidIndexNameError(name))
        else:
            try:
                response = await self.transport.arequest(
                    "PUT", f"/{name}", self._mapping_body(mapping)
                )
            except (HTTPError, InvalidURL) as ex:
                outcome = Outcome.failure(ex)
            else:
                self._log_response("Create index", name, response)
                outcome = self._outcome(response)

        if callback is not None:
            callback(outcome)
        return outcome

    def index_exists(self, name: str) -> bool:
        """Return True if the index exists.

        A missing index, or one the client cannot see, yields False. A server
        error raises `EndpointError`.
        """
        return self._exists(self.transport.request("HEAD", f"/{name}"))

    async def aindex_exists(self, name: str) -> bool:
        """Check whether the index exists without blocking. See `index_exists`."""
        return self._exists(await self.transport.arequest("HEAD", f"/{name}"))

    def get_mapping(self, name: str) -> dict[str, Any]:
        """Return the mapping of the index as reported by the endpoint."""
        return self._mapping(self.transport.request("GET", f"/{name}/_mapping"))

    async def aget_mapping(self, name: str) -> dict[str, Any]:
        """Fetch the mapping of the index without blocking."""
        return self._mapping(await self.transport.arequest("GET", f"/{name}/_mapping"))

    def index_document(self, name: str, document: Document, doc_id: str | None = None) -> bool:
        """Index a single document, with an endpoint generated id unless `doc_id` is set."""
        self._validate(name)
        method, path = self._document_target(name, doc_id)
        response = self.transport.request(method, path, serialize_document(document).decode())
        self._log_response("Index document", name, response)
        return response.is_success

    async def aindex_document(
        self, name: str, document: Document, doc_id: str | None = None
    ) -> bool:
        """Index a single document without blocking. See `index_document`."""
        self._validate(name)
        method, path = self._document_target(name, doc_id)
        response = await self.transport.arequest(
            method, path, serialize_document(document).decode()
        )
        self._log_response("Index document", name, response)
        return response.is_success

    def bulk_index(self, name: str, documents: Sequence[Document]) -> Outcome:
        """Index `documents` through as many bulk requests as their size requires.

        Requests are sent one after the other, stopping at the first failure.
        """
        self._validate(name)
        batches = split_documents(documents, self.max_bulk_bytes)
        logger.info(
            "Start bulk indexing",
            extra={"index": name, "documents": len(documents), "batches": len(batches)},
        )
        return self.submitter.submit(name, batches)

    async def abulk_index(
        self,
        name: str,
        documents: Sequence[Document],
        callback: OutcomeCallback | None = None,
    ) -> Outcome:
        """Bulk index without blocking. See `bulk_index`.

        `callback` is invoked exactly once with the final outcome.
        """
        if not is_index_name_valid(name):
            outcome = Outcome.failure(InvalidIndexNameError(name))
            if callback is not None:
                callback(outcome)
            return outcome

        batches = split_documents(documents, self.max_bulk_bytes)
        logger.info(
            "Start bulk indexing",
            extra={"index": name, "documents": len(documents), "batches": len(batches)},
        )
        return await self.submitter.submit_async(name, batches, callback)

    def close(self) -> None:
        """Release the blocking HTTP client."""
        self.transport.close()

    async def aclose(self) -> None:
        """Release every HTTP client."""
        await self.transport.aclose()

    @staticmethod
    def _validate(name: str) -> None:
        if not is_index_name_valid(name):
            raise InvalidIndexNameError(name)

    @staticmethod
    def _mapping_body(mapping: FieldMapping | None) -> str | None:
        return generate_mapping(mapping) if mapping is not None else None

    @staticmethod
    def _document_target(name: str, doc_id: str | None) -> tuple[str, str]:
        if doc_id is None:
            return "POST", f"/{name}/_doc"
        return "PUT", f"/{name}/_doc/{doc_id}"

    @staticmethod
    def _exists(response: Response) -> bool:
        if response.is_server_error:
            raise EndpointError(response.status_code, response.reason_phrase)
        return response.is_success

    @staticmethod
    def _mapping(response: Response) -> dict[str, Any]:
        if response.status_code != 200:
            raise EndpointError(response.status_code, response.reason_phrase)
        return cast(dict[str, Any], orjson.loads(response.content))

    @staticmethod
    def _outcome(response: Response) -> Outcome:
        if response.is_success:
            return Outcome.ok()
        return Outcome.failure(EndpointError(response.status_code, response.reason_phrase))

    @staticmethod
    def _log_response(action: str, name: str, response: Response) -> None:
        if response.is_success:
            logger.info(f"{action} succeeded", extra={"index": name})
        else:
            logger.warning(
                f"{action} failed: {response.status_code} {response.reason_phrase}",
                extra={"index": name, "status_code": response.status_code},
            )
