"""Repository configuration for a catalog run."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator

from apkcatalog.constants import (
    DEFAULT_ALPINE_VERSION,
    DEFAULT_DISPLAY_NAMES,
    DEFAULT_REPO_PRIORITY,
    DEFAULT_REPOSITORIES,
)
from apkcatalog.exceptions import ConfigError

logger = logging.getLogger(__name__)


class CatalogConfig(BaseModel):
    """Which index archives to read and how to rank their repositories.

    Attributes:
        repositories: Architecture -> repository id -> index archive URL.
        repo_priority: Repository ids, highest priority first.
        display_names: Repository id -> human readable label.
        alpine_version: Distribution tag copied into the catalog metadata.
    """

    repositories: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {arch: dict(repos) for arch, repos in DEFAULT_REPOSITORIES.items()}
    )
    repo_priority: list[str] = Field(default_factory=lambda: list(DEFAULT_REPO_PRIORITY))
    display_names: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_DISPLAY_NAMES))
    alpine_version: str = DEFAULT_ALPINE_VERSION

    @model_validator(mode="after")
    def _check_priority(self) -> "CatalogConfig":
        if len(set(self.repo_priority)) != len(self.repo_priority):
            raise ValueError("repo_priority must not contain duplicates")
        configured = {repo for repos in self.repositories.values() for repo in repos}
        if unranked := sorted(configured.difference(self.repo_priority)):
            logger.warning(f"Repositories missing from repo_priority will rank lowest: {', '.join(unranked)}")
        return self

    @property
    def architectures(self) -> list[str]:
        return list(self.repositories)

    def display_name(self, repo: str) -> str:
        """Get the label for a repository id, falling back to the id itself."""
        return self.display_names.get(repo, repo)

    def ordered_sources(self, architecture: str) -> list[tuple[str, str]]:
        """(repository id, URL) pairs for an architecture, highest priority first.

        Repositories that are not ranked in repo_priority follow in name order.
        """
        repos = self.repositories.get(architecture, {})
        ranked = [repo for repo in self.repo_priority if repo in repos]
        unranked = sorted(repo for repo in repos if repo not in self.repo_priority)
        return [(repo, repos[repo]) for repo in ranked + unranked]

    def restrict_to(self, architectures: list[str]) -> "CatalogConfig":
        """Return a copy of the configuration limited to the given architectures."""
        if unknown := [arch for arch in architectures if arch not in self.repositories]:
            raise ConfigError(f"Unknown architecture(s): {', '.join(unknown)}")
        repositories = {arch: dict(self.repositories[arch]) for arch in architectures}
        return self.model_copy(update={"repositories": repositories})


def load_config(path: Path | None = None) -> CatalogConfig:
    """Load a catalog configuration from a JSON file, or the built-in defaults.

    Args:
        path: JSON file with any of the CatalogConfig fields. Missing fields keep their defaults.

    Raises:
        ConfigError: If the file cannot be read or does not validate.
    """
    if path is None:
        return CatalogConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Unable to read configuration file {path}: {e}") from e

    try:
        config = CatalogConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.debug(f"Loaded configuration from {path}")
    return config
