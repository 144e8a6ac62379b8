"""CLI commands for the bulk_indexer module"""

import asyncio
import logging
from pathlib import Path

import typer

from esclient.configs import settings as config
from esclient.elastic.client import ElasticClient
from esclient.elastic.protocol import Document, Outcome
from esclient.elastic.utils import is_index_name_valid
from esclient.exceptions import InvalidIndexNameError
from esclient.jobs.bulk_indexer.util import load_documents

logger = logging.getLogger(__name__)

es_settings = config.elasticsearch

bulk_indexer_cmd = typer.Typer(
    name="bulk-indexer",
    help="Commands for bulk indexing documents into Elasticsearch",
)


@bulk_indexer_cmd.command()
def index(
    name: str,
    documents_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="File with one JSON document per line"
    ),
    max_bytes: int = typer.Option(
        config.bulk.max_bytes, "--max-bytes", help="Maximum size of a bulk request body"
    ),
    non_blocking: bool = typer.Option(
        False, "--non-blocking", help="Send the bulk requests from an asyncio event loop"
    ),
    host: str = typer.Option(es_settings.host, "--host", help="Elasticsearch host"),
    port: int = typer.Option(es_settings.port, "--port", help="Elasticsearch port"),
    scheme: str = typer.Option(es_settings.scheme, "--scheme", help="Either http or https"),
):
    """Index every document of a JSON lines file"""
    if not is_index_name_valid(name):
        raise typer.BadParameter(str(InvalidIndexNameError(name)), param_hint="NAME")
    try:
        documents = load_documents(documents_path)
    except ValueError as ex:
        raise typer.BadParameter(str(ex), param_hint="DOCUMENTS_PATH") from ex
    if max_bytes <= 0:
        raise typer.BadParameter("must be positive", param_hint="--max-bytes")

    logger.info(
        "Loaded documents", extra={"source": str(documents_path), "documents": len(documents)}
    )
    client = ElasticClient(host, port, scheme, max_bulk_bytes=max_bytes)

    if non_blocking:
        outcome = asyncio.run(_index_async(client, name, documents))
    else:
        with client:
            outcome = client.bulk_index(name, documents)

    if not outcome:
        typer.echo(
            f"bulk indexing failed after {outcome.batches_succeeded} batches: {outcome.error}",
            err=True,
        )
        raise typer.Exit(code=1)
    typer.echo(f"indexed {len(documents)} documents in {outcome.batches_succeeded} batches")


async def _index_async(client: ElasticClient, name: str, documents: list[Document]) -> Outcome:
    async with client:
        return await client.abulk_index(name, documents)
