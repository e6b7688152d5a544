import logging

import pytest

from apkcatalog.collector import collect_architecture, collect_packages
from apkcatalog.exceptions import FetchError
from apkcatalog.models import CatalogConfig
from apkcatalog.pipeline import build_package_database

CORE_A = "P:pkg1\nV:1.0\nS:2048\n\nP:only-core\nV:1\n"
MAIN_A = "P:pkg1\nV:0.5\n\nP:only-main\nV:2\n"
CORE_B = "P:pkg2\nV:2.0\n"
MAIN_B = "P:pkg1\nV:0.9\nS:1024\n"


class FakeFetcher:
    def __init__(self, indexes: dict[str, str], failures: dict[str, Exception] | None = None):
        self.indexes = indexes
        self.failures = failures or {}
        self.calls: list[str] = []

    async def __call__(self, url: str) -> list[str]:
        self.calls.append(url)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.indexes:
            raise FetchError(url, "HTTP 404 Not Found", status_code=404)
        return self.indexes[url].split("\n")


@pytest.fixture
def fetcher(two_arch_config) -> FakeFetcher:
    urls = two_arch_config.repositories
    return FakeFetcher(
        {
            urls["a"]["core"]: CORE_A,
            urls["a"]["main"]: MAIN_A,
            urls["b"]["core"]: CORE_B,
            urls["b"]["main"]: MAIN_B,
        }
    )


@pytest.mark.asyncio
async def test_collect_architecture_reads_in_priority_order(two_arch_config, fetcher):
    records = await collect_architecture("a", two_arch_config, fetcher)

    assert fetcher.calls == [two_arch_config.repositories["a"]["core"], two_arch_config.repositories["a"]["main"]]
    assert [(r.name, r.source_repo) for r in records] == [
        ("pkg1", "core"),
        ("only-core", "core"),
        ("pkg1", "main"),
        ("only-main", "main"),
    ]
    assert {r.repo for r in records} == {"Core", "Main"}
    assert {r.architecture for r in records} == {"a"}


@pytest.mark.asyncio
async def test_collect_packages_covers_every_architecture(two_arch_config, fetcher):
    by_arch = await collect_packages(two_arch_config, fetcher)

    assert set(by_arch) == {"a", "b"}
    assert [r.name for r in by_arch["b"]] == ["pkg2", "pkg1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [FetchError("x", "connection reset"), RuntimeError("bad gzip")])
async def test_failed_pair_contributes_nothing(two_arch_config, fetcher, error):
    fetcher.failures[two_arch_config.repositories["a"]["core"]] = error

    by_arch = await collect_packages(two_arch_config, fetcher)

    assert [(r.name, r.source_repo) for r in by_arch["a"]] == [("pkg1", "main"), ("only-main", "main")]
    assert len(by_arch["b"]) == 2


@pytest.mark.asyncio
async def test_missing_index_is_logged_at_debug(two_arch_config, fetcher, caplog):
    caplog.set_level(logging.DEBUG, logger="apkcatalog.collector")
    del fetcher.indexes[two_arch_config.repositories["a"]["main"]]

    records = await collect_architecture("a", two_arch_config, fetcher)

    assert [r.source_repo for r in records] == ["core", "core"]
    (failure,) = [r for r in caplog.records if "404" in r.getMessage()]
    assert failure.levelno == logging.DEBUG


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        FetchError("x", "HTTP 500 Internal Server Error", status_code=500),
        FetchError("x", "timed out"),
        RuntimeError("boom"),
    ],
)
async def test_other_failures_are_logged_at_warning(two_arch_config, fetcher, caplog, error):
    caplog.set_level(logging.DEBUG, logger="apkcatalog.collector")
    fetcher.failures[two_arch_config.repositories["a"]["main"]] = error

    await collect_architecture("a", two_arch_config, fetcher)

    (failure,) = [r for r in caplog.records if str(error) in r.getMessage()]
    assert failure.levelno == logging.WARNING


@pytest.mark.asyncio
async def test_unranked_repositories_are_read_last():
    config = CatalogConfig(
        repositories={"a": {"zz-extra": "u3", "aa-extra": "u2", "main": "u1"}},
        repo_priority=["main"],
    )
    fetcher = FakeFetcher({"u1": "P:x\n", "u2": "P:y\n", "u3": "P:z\n"})

    records = await collect_architecture("a", config, fetcher)

    assert fetcher.calls == ["u1", "u2", "u3"]
    assert [r.name for r in records] == ["x", "y", "z"]


@pytest.mark.asyncio
async def test_pipeline_end_to_end(two_arch_config, fetcher):
    document = await build_package_database(two_arch_config, fetcher)

    pkg1 = document.details["pkg1"]
    assert pkg1.version == "1.0"
    assert pkg1.source_repo == "core"
    assert set(pkg1.architectures) == {"a", "b"}
    assert sorted(document.details) == ["only-core", "only-main", "pkg1", "pkg2"]
    assert document.metadata.total_packages == 4
    assert document.metadata.source_repositories == {"core": 3, "main": 3}
    assert document.metadata.total_package_size_mb == 0


@pytest.mark.asyncio
async def test_pipeline_survives_fetch_failure(two_arch_config, fetcher):
    fetcher.indexes.pop(two_arch_config.repositories["b"]["main"])

    document = await build_package_database(two_arch_config, fetcher)

    assert document.details["pkg1"].architectures == ["a"]
    assert document.metadata.total_packages == 4
