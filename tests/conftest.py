"""Shared fixtures for apkcatalog tests."""

import gzip
import io
import tarfile

import pytest

from apkcatalog.models import CatalogConfig, PackageRecord

SAMPLE_INDEX = """\
C:Q1k8bSJVa9RNN4hBRsXjcBnhz2qmQ=
P:busybox
V:1.36.1-r15
A:x86_64
S:514263
I:969304
T:Size optimized toolkit of many common UNIX utilities
U:https://busybox.net/
L:GPL-2.0-only
o:busybox
m:Sören Tempel <soeren+alpine@soeren-tempel.net>
t:1700000000
D:so:libc.musl-x86_64.so.1
p:cmd:busybox=1.36.1-r15 /bin/sh

C:Q1abcdefghijklmnopqrstuvwxyz0=
P:curl
V:8.5.0-r0
A:x86_64
S:152000
I:300000
T:URL retrieval utility and library
U:https://curl.se/
L:curl
o:curl
m:Natanael Copa <ncopa@alpinelinux.org>
t:1701234567
D:ca-certificates libcurl=8.5.0-r0 so:libc.musl-x86_64.so.1 so:libcurl.so.4
p:cmd:curl=8.5.0-r0

"""


def _tar_member(name: str, content: bytes) -> tuple[tarfile.TarInfo, io.BytesIO]:
    info = tarfile.TarInfo(name)
    info.size = len(content)
    return info, io.BytesIO(content)


@pytest.fixture
def sample_index() -> str:
    return SAMPLE_INDEX


@pytest.fixture
def make_archive():
    """Build APKINDEX.tar.gz bytes holding the given index text."""

    def _make(index_text: str, member_name: str = "APKINDEX", signed: bool = False) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tar:
            tar.addfile(*_tar_member("DESCRIPTION", b"test repository"))
            tar.addfile(*_tar_member(member_name, index_text.encode("utf-8")))
        archive = buf.getvalue()
        if not signed:
            return archive

        # signature segment: a tar stream cut before its end-of-archive blocks, gzipped on its own
        signature = b"not-a-real-signature"
        info = tarfile.TarInfo(".SIGN.RSA.test.rsa.pub")
        info.size = len(signature)
        padding = b"\0" * (-len(signature) % tarfile.BLOCKSIZE)
        return gzip.compress(info.tobuf() + signature + padding) + archive

    return _make


@pytest.fixture
def record():
    """Build a PackageRecord with sensible defaults."""

    def _record(name: str, source_repo: str, architecture: str = "x86_64", **fields) -> PackageRecord:
        fields.setdefault("version", "1.0")
        fields.setdefault("repo", source_repo.title())
        return PackageRecord(name=name, source_repo=source_repo, architecture=architecture, **fields)

    return _record


@pytest.fixture
def two_arch_config() -> CatalogConfig:
    return CatalogConfig(
        repositories={
            "a": {
                "core": "https://repo.test/core/a/APKINDEX.tar.gz",
                "main": "https://repo.test/main/a/APKINDEX.tar.gz",
            },
            "b": {
                "core": "https://repo.test/core/b/APKINDEX.tar.gz",
                "main": "https://repo.test/main/b/APKINDEX.tar.gz",
            },
        },
        repo_priority=["core", "main"],
        display_names={"core": "Core", "main": "Main"},
        alpine_version="v3.20",
    )
