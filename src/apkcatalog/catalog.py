"""Build and write the consolidated package catalog."""

import logging
import os
import tempfile
from collections import Counter
from pathlib import Path

from pydantic_core import PydanticSerializationError

from apkcatalog.exceptions import CatalogWriteError
from apkcatalog.models import (
    CatalogConfig,
    CatalogDocument,
    CatalogMetadata,
    PackageSummary,
    ReconciliationResult,
)
from apkcatalog.utils import leading_int, rfc3339_now, sort_architectures

logger = logging.getLogger(__name__)

BYTES_PER_KB = 1024


def parse_size(value: str | None) -> int:
    """Size in bytes from an index size field; empty or non-numeric fields count as 0."""
    return leading_int(value)


def bytes_to_mb(total: int) -> int:
    """Whole megabytes, rounded down."""
    return total // BYTES_PER_KB // BYTES_PER_KB


def build_catalog(
    result: ReconciliationResult,
    config: CatalogConfig,
    now: str | None = None,
) -> CatalogDocument:
    """Project reconciled packages into the catalog document.

    Args:
        result: Output of the reconciler
        config: The configuration the run used, for version tag and priority order
        now: Override for the last_updated timestamp

    Returns:
        The catalog with listing, details and metadata
    """
    summaries: list[PackageSummary] = []
    arch_counts: Counter[str] = Counter()
    total_package_size = 0
    total_installed_size = 0

    for package in result.packages.values():
        summaries.append(PackageSummary.from_package(package))
        arch_counts.update(package.architectures)
        total_package_size += parse_size(package.package_size)
        total_installed_size += parse_size(package.installed_size)

    metadata = CatalogMetadata(
        total_packages=len(result.packages),
        repositories=dict(result.seen_by_repo),
        source_repositories=dict(result.seen_by_source_repo),
        architectures={arch: arch_counts[arch] for arch in sort_architectures(list(arch_counts))},
        total_package_size_mb=bytes_to_mb(total_package_size),
        total_installed_size_mb=bytes_to_mb(total_installed_size),
        last_updated=now or rfc3339_now(),
        alpine_version=config.alpine_version,
        repo_priority=list(config.repo_priority),
    )
    return CatalogDocument(packages=summaries, details=dict(result.packages), metadata=metadata)


def write_catalog(document: CatalogDocument, path: Path) -> Path:
    """Write the catalog as indented JSON.

    The document is written to a temporary file next to ``path`` and moved into
    place, so ``path`` either holds the complete new catalog or is untouched.

    Raises:
        CatalogWriteError: If serialization or any filesystem operation fails
    """
    try:
        payload = document.model_dump_json(indent=2)
    except (PydanticSerializationError, ValueError) as e:
        raise CatalogWriteError(path, f"serialization failed: {e}") from e

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        os.close(fd)
        tmp_path = Path(tmp_name)
        tmp_path.write_text(f"{payload}\n", encoding="utf-8")
        tmp_path.chmod(0o644)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise CatalogWriteError(path, str(e)) from e

    logger.debug(f"Wrote {len(payload)} bytes to {path}")
    return path


def log_statistics(document: CatalogDocument) -> None:
    """Log a summary of the catalog metadata."""
    meta = document.metadata
    logger.info(f"Total packages: {meta.total_packages}")
    logger.info("Repositories:")
    for repo, count in meta.repositories.items():
        logger.info(f"  - {repo}: {count}")
    logger.info("Source repositories:")
    for repo, count in meta.source_repositories.items():
        logger.info(f"  - {repo}: {count}")
    logger.info("Architectures:")
    for arch, count in meta.architectures.items():
        logger.info(f"  - {arch}: {count}")
    logger.info(f"Total package size: {meta.total_package_size_mb} MB")
    logger.info(f"Total installed size: {meta.total_installed_size_mb} MB")
