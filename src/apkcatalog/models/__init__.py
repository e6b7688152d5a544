"""Expose data models."""

from .catalog import CatalogDocument, CatalogMetadata, ReconciliationResult, Replacement
from .config import CatalogConfig, load_config
from .package import PackageRecord, PackageSummary, ReconciledPackage

__all__ = [
    "CatalogConfig",
    "CatalogDocument",
    "CatalogMetadata",
    "PackageRecord",
    "PackageSummary",
    "ReconciledPackage",
    "ReconciliationResult",
    "Replacement",
    "load_config",
]
