"""CLI commands for the index_admin module"""

import logging

import orjson
import typer

from esclient.configs import settings as config
from esclient.elastic.client import ElasticClient
from esclient.elastic.utils import is_index_name_valid
from esclient.exceptions import InvalidIndexNameError
from esclient.jobs.index_admin.util import parse_fields

logger = logging.getLogger(__name__)

es_settings = config.elasticsearch

# Shared options
host_option = typer.Option(es_settings.host, "--host", help="Elasticsearch host")

port_option = typer.Option(es_settings.port, "--port", help="Elasticsearch port")

scheme_option = typer.Option(es_settings.scheme, "--scheme", help="Either http or https")

index_admin_cmd = typer.Typer(
    name="index-admin",
    help="Commands to create and inspect Elasticsearch indices",
)


@index_admin_cmd.command()
def validate_name(name: str):
    """Check an index name without contacting the endpoint"""
    valid = is_index_name_valid(name)
    typer.echo("valid" if valid else "invalid")
    if not valid:
        raise typer.Exit(code=1)


@index_admin_cmd.command()
def create(
    name: str,
    field: list[str] = typer.Option(
        [], "--field", help="Field declaration as `name:type`, can be repeated"
    ),
    host: str = host_option,
    port: int = port_option,
    scheme: str = scheme_option,
):
    """Create an index, with a mapping when fields are given"""
    try:
        mapping = parse_fields(field) if field else None
    except ValueError as ex:
        raise typer.BadParameter(str(ex), param_hint="--field") from ex
    with ElasticClient(host, port, scheme) as client:
        try:
            created = client.create_index(name, mapping)
        except InvalidIndexNameError as ex:
            typer.echo(str(ex), err=True)
            raise typer.Exit(code=2)

    if not created:
        logger.error("Could not create the index", extra={"index": name})
        raise typer.Exit(code=1)
    typer.echo(f"created {name}")


@index_admin_cmd.command()
def exists(
    name: str,
    host: str = host_option,
    port: int = port_option,
    scheme: str = scheme_option,
):
    """Check whether an index exists"""
    with ElasticClient(host, port, scheme) as client:
        found = client.index_exists(name)
    typer.echo("true" if found else "false")
    if not found:
        raise typer.Exit(code=1)


@index_admin_cmd.command()
def mapping(
    name: str,
    host: str = host_option,
    port: int = port_option,
    scheme: str = scheme_option,
):
    """Print the mapping of an index"""
    with ElasticClient(host, port, scheme) as client:
        index_mapping = client.get_mapping(name)
    typer.echo(orjson.dumps(index_mapping, option=orjson.OPT_INDENT_2).decode())
