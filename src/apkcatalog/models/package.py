"""Models for package records read from APKINDEX files."""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)

StrListField = Annotated[list[str], Field(default_factory=list)]


def _drop_empty(data: dict[str, Any], keep: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key in keep or value not in (None, "", [])}


class PackageRecord(BaseModel):
    """A single package entry from one repository/architecture index."""

    checksum: str = ""
    name: str = ""
    version: str = ""
    architecture: str = ""
    package_size: str = ""
    installed_size: str = ""
    description: str = ""
    url: str = ""
    license: str = ""
    origin: str = ""
    maintainer: str = ""
    build_time: str = ""
    dependencies: StrListField
    provides: StrListField
    install_if: StrListField
    repo: str = ""
    architectures: StrListField
    source_repo: str = ""

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _drop_empty(handler(self), frozenset({"name", "version", "repo"}))


class ReconciledPackage(PackageRecord):
    """The winning record for a package name, with every architecture it was seen on."""

    model_config = ConfigDict(frozen=True)

    @field_validator("architectures")
    @classmethod
    def _unique_architectures(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("a reconciled package needs at least one architecture")
        return list(dict.fromkeys(value))


class PackageSummary(BaseModel):
    """Lightweight listing entry for a reconciled package."""

    name: str
    version: str
    description: str = ""
    repo: str = ""
    architectures: StrListField
    source_repo: str = ""

    @classmethod
    def from_package(cls, package: PackageRecord) -> "PackageSummary":
        return cls(
            name=package.name,
            version=package.version,
            description=package.description,
            repo=package.repo,
            architectures=list(package.architectures),
            source_repo=package.source_repo,
        )

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return _drop_empty(handler(self), frozenset({"name", "version", "description", "repo"}))
