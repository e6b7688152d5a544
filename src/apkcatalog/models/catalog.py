"""Models for reconciliation results and the catalog document."""

from pydantic import BaseModel, Field

from .package import PackageSummary, ReconciledPackage


class Replacement(BaseModel):
    """A package whose winning record moved to a higher-priority source repository."""

    name: str
    old_source_repo: str
    new_source_repo: str

    def __str__(self) -> str:
        return f"{self.name}: {self.old_source_repo} -> {self.new_source_repo}"


class ReconciliationResult(BaseModel):
    """Reconciled packages plus what was seen on the way there.

    The counters hold raw record counts from before reconciliation, so a package
    published in two repositories for two architectures counts four times.
    """

    packages: dict[str, ReconciledPackage] = Field(default_factory=dict)
    replacements: list[Replacement] = Field(default_factory=list)
    seen_by_repo: dict[str, int] = Field(default_factory=dict)
    seen_by_source_repo: dict[str, int] = Field(default_factory=dict)
    seen_by_architecture: dict[str, int] = Field(default_factory=dict)


class CatalogMetadata(BaseModel):
    total_packages: int
    repositories: dict[str, int]
    source_repositories: dict[str, int]
    architectures: dict[str, int]
    total_package_size_mb: int
    total_installed_size_mb: int
    last_updated: str
    alpine_version: str
    repo_priority: list[str]


class CatalogDocument(BaseModel):
    """The consolidated package database written to disk."""

    packages: list[PackageSummary]
    details: dict[str, ReconciledPackage]
    metadata: CatalogMetadata
