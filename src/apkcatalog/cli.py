"""apkcatalog command line interface."""

import asyncio
import logging
from pathlib import Path

import typer

from apkcatalog.catalog import log_statistics, write_catalog
from apkcatalog.constants import DEFAULT_OUTPUT
from apkcatalog.exceptions import CatalogWriteError, ConfigError
from apkcatalog.fetcher import SkipMode
from apkcatalog.models import CatalogConfig, load_config
from apkcatalog.pipeline import build_package_database

logger = logging.getLogger(__name__)

cli = typer.Typer(help="Build a consolidated JSON catalog from APK repository indexes.", no_args_is_help=True)


def _load(config_file: Path | None, arch: list[str] | None) -> CatalogConfig:
    try:
        config = load_config(config_file)
        return config.restrict_to(arch) if arch else config
    except ConfigError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e


@cli.command()
def build(
    output: Path = typer.Option(DEFAULT_OUTPUT, "--output", "-o", help="Where to write the catalog JSON"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="JSON configuration file"),
    arch: list[str] | None = typer.Option(None, "--arch", "-a", help="Only process these architectures"),
    skip_mode: SkipMode = typer.Option(SkipMode.CHECK, help="When to reuse cached index archives"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Fetch every configured index and write the package catalog."""
    if verbose:
        logging.getLogger("apkcatalog").setLevel(logging.DEBUG)

    config = _load(config_file, arch)
    logger.info(f"Building package catalog for {', '.join(config.architectures)}")

    document = asyncio.run(build_package_database(config, skip_mode=skip_mode))
    try:
        write_catalog(document, output)
    except CatalogWriteError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    log_statistics(document)
    logger.info(f"Saved {document.metadata.total_packages} packages to '{output}'")


@cli.command()
def repos(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="JSON configuration file"),
):
    """Show the configured repositories in priority order."""
    config = _load(config_file, None)
    for arch in config.architectures:
        typer.echo(f"{arch}:")
        for repo, url in config.ordered_sources(arch):
            typer.echo(f"  {config.display_name(repo)} [{repo}] {url}")


def main() -> None:
    """Main entry point for the apkcatalog CLI."""
    cli()


if __name__ == "__main__":
    main()
