"""Utilities for the bulk indexer job"""

from pathlib import Path

import orjson

from esclient.elastic.protocol import Document


def load_documents(path: Path) -> list[Document]:
    """Read one JSON object per line, skipping blank lines.

    Raises ValueError when a line does not hold a JSON object.
    """
    documents: list[Document] = []
    with path.open("rb") as file:
        for line_number, line in enumerate(file, start=1):
            if not line.strip():
                continue
            document = orjson.loads(line)
            if not isinstance(document, dict):
                raise ValueError(f"Line {line_number} of {path} is not a JSON object")
            documents.append(document)
    return documents
