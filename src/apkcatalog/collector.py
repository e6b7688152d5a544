"""Collect package records for every configured architecture and repository."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from apkcatalog.exceptions import FetchError
from apkcatalog.fetcher import fetch_index_lines
from apkcatalog.models import CatalogConfig, PackageRecord
from apkcatalog.parser import iter_index_records

logger = logging.getLogger(__name__)

IndexFetcher = Callable[[str], Awaitable[Iterable[str]]]


async def collect_architecture(
    architecture: str,
    config: CatalogConfig,
    fetch: IndexFetcher = fetch_index_lines,
) -> list[PackageRecord]:
    """Fetch and decode every repository configured for one architecture.

    Repositories are read in priority order, so records from higher-priority
    repositories come first in the returned list. A repository that fails to
    fetch or decode contributes no records.
    """
    records: list[PackageRecord] = []
    for repo, url in config.ordered_sources(architecture):
        label = config.display_name(repo)
        try:
            lines = await fetch(url)
            packages = list(
                iter_index_records(
                    lines,
                    repo=label,
                    source_repo=repo,
                    architecture=architecture,
                )
            )
        except FetchError as e:
            if e.status_code == 404:
                logger.debug(f"{label} ({architecture}): {e}")
            else:
                logger.warning(f"{label} ({architecture}): {e}")
            continue
        except Exception as e:
            logger.warning(f"{label} ({architecture}): {e}")
            continue

        logger.info(f"{label} ({architecture}): {len(packages)} packages")
        records.extend(packages)

    logger.info(f"{architecture.upper()} total: {len(records)} packages")
    return records


async def collect_packages(
    config: CatalogConfig,
    fetch: IndexFetcher = fetch_index_lines,
) -> dict[str, list[PackageRecord]]:
    """Collect records for all configured architectures.

    Architectures are independent and run concurrently; the returned mapping is
    complete for every architecture before it is handed to reconciliation.

    Returns:
        Architecture -> records in repository priority order
    """
    architectures = config.architectures
    results = await asyncio.gather(*(collect_architecture(arch, config, fetch) for arch in architectures))
    return dict(zip(architectures, results, strict=True))
