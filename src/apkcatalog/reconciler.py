"""Merge same-named packages across architectures and repositories.

For each package name one record wins: the one from the highest-priority
source repository. Its scalar fields (version, description, sizes, ...) are
kept as-is, while the architecture list is the union of every architecture
any repository published the name for. Records from repositories of equal
rank never displace an earlier winner, so on ties the first record seen wins.
"""

import logging
from collections import Counter
from collections.abc import Mapping, Sequence

from apkcatalog.models import PackageRecord, ReconciledPackage, ReconciliationResult, Replacement

logger = logging.getLogger(__name__)


def repo_rank(repo: str, repo_priority: Sequence[str]) -> int:
    """Rank of a source repository, lower is higher priority.

    Repositories missing from the priority list rank after all listed ones.
    """
    try:
        return repo_priority.index(repo)
    except ValueError:
        return len(repo_priority)


def reconcile(
    records_by_arch: Mapping[str, Sequence[PackageRecord]],
    repo_priority: Sequence[str],
) -> ReconciliationResult:
    """Fold per-architecture records into one ReconciledPackage per name.

    Args:
        records_by_arch: Architecture -> records, in collection order
        repo_priority: Source repository ids, highest priority first

    Returns:
        The reconciled packages, the replacements made along the way and raw
        record counters
    """
    winners: dict[str, PackageRecord] = {}
    architectures: dict[str, list[str]] = {}
    replacements: dict[str, Replacement] = {}
    seen_by_repo: Counter[str] = Counter()
    seen_by_source_repo: Counter[str] = Counter()
    seen_by_architecture: Counter[str] = Counter()

    for arch, records in records_by_arch.items():
        seen_by_architecture[arch] += len(records)
        for record in records:
            seen_by_repo[record.repo] += 1
            seen_by_source_repo[record.source_repo] += 1

            name = record.name
            current = winners.get(name)
            if current is None:
                winners[name] = record
                architectures[name] = [arch]
                continue

            if repo_rank(record.source_repo, repo_priority) < repo_rank(current.source_repo, repo_priority):
                replacements[name] = Replacement(
                    name=name,
                    old_source_repo=current.source_repo,
                    new_source_repo=record.source_repo,
                )
                winners[name] = record

            if arch not in architectures[name]:
                architectures[name].append(arch)

    packages = {
        name: ReconciledPackage.model_validate({**dict(record), "architectures": architectures[name]})
        for name, record in winners.items()
    }

    for arch, count in seen_by_architecture.items():
        logger.info(f"{arch.upper()}: {count} packages")
    if replacements:
        logger.info(f"Resolved {len(replacements)} conflicts")
        for replacement in replacements.values():
            logger.debug(f"  {replacement}")
    logger.info(f"Merged into {len(packages)} unique packages")

    return ReconciliationResult(
        packages=packages,
        replacements=list(replacements.values()),
        seen_by_repo=dict(seen_by_repo),
        seen_by_source_repo=dict(seen_by_source_repo),
        seen_by_architecture=dict(seen_by_architecture),
    )
