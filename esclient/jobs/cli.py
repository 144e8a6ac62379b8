"""Entrypoint for the command line interface."""

import typer

from esclient.configs.app_configs.config_logging import configure_logging
from esclient.jobs.bulk_indexer import bulk_indexer_cmd
from esclient.jobs.index_admin import index_admin_cmd

cli = typer.Typer(no_args_is_help=True, add_completion=False)

# Add the index administration subcommands
cli.add_typer(index_admin_cmd, no_args_is_help=True)

# Add the bulk indexer subcommands
cli.add_typer(bulk_indexer_cmd, no_args_is_help=True)


@cli.callback()
def setup():
    """CLI Entrypoint"""
    configure_logging()


if __name__ == "__main__":
    cli()
