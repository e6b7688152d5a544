"""Run the whole fetch, decode, reconcile and build sequence."""

import logging
from functools import partial
from pathlib import Path

import httpx

from apkcatalog.catalog import build_catalog
from apkcatalog.collector import IndexFetcher, collect_packages
from apkcatalog.fetcher import DEFAULT_TIMEOUT, SkipMode, fetch_index_lines
from apkcatalog.models import CatalogConfig, CatalogDocument
from apkcatalog.reconciler import reconcile

logger = logging.getLogger(__name__)


async def build_package_database(
    config: CatalogConfig,
    fetch: IndexFetcher | None = None,
    *,
    skip_mode: SkipMode = SkipMode.CHECK,
    cache_dir: Path | None = None,
) -> CatalogDocument:
    """Build the catalog document for a configuration.

    Args:
        config: Repositories, priority order and version tag
        fetch: Index fetcher; defaults to downloading over HTTP with a shared client
        skip_mode: Cache reuse mode for the default fetcher
        cache_dir: Cache root for the default fetcher
    """
    if fetch is not None:
        records_by_arch = await collect_packages(config, fetch)
    else:
        async with httpx.AsyncClient(follow_redirects=True, timeout=DEFAULT_TIMEOUT) as client:
            fetcher = partial(fetch_index_lines, client=client, skip_mode=skip_mode, cache_dir=cache_dir)
            records_by_arch = await collect_packages(config, fetcher)

    logger.info("Merging packages and resolving conflicts")
    result = reconcile(records_by_arch, config.repo_priority)
    return build_catalog(result, config)
