"""Index name validation and request body builders."""

from itertools import accumulate, groupby
from typing import Iterable, Sequence

import orjson

from esclient.elastic.protocol import Batch, Document, FieldMapping

MAX_INDEX_NAME_BYTES = 255
FORBIDDEN_CHARS = frozenset('\\/*?"<>| ,:#')
FORBIDDEN_FIRST_CHARS = ("-", "_", "+", ".")

# Bulk action line telling the endpoint to index the document that follows.
INDEX_ACTION = b'{"index":{}}'


def is_index_name_valid(name: str) -> bool:
    """Return True if `name` is an acceptable index name.

    Upper case letters are not checked, callers are expected to lower-case the
    name themselves.
    """
    if name in (".", ".."):
        return False
    if len(name.encode("utf-8")) > MAX_INDEX_NAME_BYTES:
        return False
    if name.startswith(FORBIDDEN_FIRST_CHARS):
        return False
    return FORBIDDEN_CHARS.isdisjoint(name)


def generate_mapping(mapping: FieldMapping) -> str:
    """Return the index creation body declaring a type for every field."""
    properties = {field: {"type": field_type} for field, field_type in mapping.items()}
    return orjson.dumps({"mappings": {"properties": properties}}).decode("utf-8")


def serialize_document(document: Document) -> bytes:
    """Serialize a document to JSON. Dates are rendered in ISO 8601."""
    return orjson.dumps(dict(document))


def document_size(document: Document) -> int:
    """Return the size in bytes of the serialized document."""
    return len(serialize_document(document))


def build_bulk_body(batch: Iterable[Document]) -> str:
    """Return the newline-delimited bulk body indexing every document in order."""
    lines = b"".join(INDEX_ACTION + b"\n" + serialize_document(doc) + b"\n" for doc in batch)
    return lines.decode("utf-8")


def split_documents(documents: Sequence[Document], max_bytes: int) -> tuple[Batch, ...]:
    """Split `documents` into batches whose serialized size stays within `max_bytes`.

    Input order is kept. A document larger than `max_bytes` on its own becomes a
    batch of one; documents are never dropped nor truncated.
    """
    if max_bytes <= 0:
        raise ValueError(f"max_bytes must be positive, got {max_bytes}")

    def assign(state: tuple[int, int], size: int) -> tuple[int, int]:
        batch_number, running = state
        if running > 0 and running + size > max_bytes:
            return batch_number + 1, size
        return batch_number, running + size

    states = accumulate((document_size(doc) for doc in documents), assign, initial=(0, 0))
    next(states)
    numbered = zip((batch_number for batch_number, _ in states), documents)
    return tuple(
        tuple(doc for _, doc in group) for _, group in groupby(numbered, key=lambda pair: pair[0])
    )
