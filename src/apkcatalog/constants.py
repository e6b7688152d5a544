from os import getenv
from pathlib import Path

# cache root for downloaded index archives; created on first download
DATA_DIR = Path(getenv("APKCATALOG_DATA_DIR", "data")).resolve()
REPOS_DIR = DATA_DIR / "repos"

DEFAULT_OUTPUT = Path(getenv("APKCATALOG_OUTPUT", "packages.json"))

INDEX_MEMBER_NAME = "APKINDEX"

DEFAULT_ALPINE_VERSION = "latest-stable"

# fmt: off
DEFAULT_REPOSITORIES: dict[str, dict[str, str]] = {
    "x86_64": {
        "alpine-community": "https://dl-cdn.alpinelinux.org/alpine/latest-stable/community/x86_64/APKINDEX.tar.gz",
        "alpine-main": "https://dl-cdn.alpinelinux.org/alpine/latest-stable/main/x86_64/APKINDEX.tar.gz",
        "shaanos-core": "https://dl-os.shvn.tr/core/x86_64/APKINDEX.tar.gz",
    },
    "x86": {
        "alpine-community": "https://dl-cdn.alpinelinux.org/alpine/latest-stable/community/x86/APKINDEX.tar.gz",
        "alpine-main": "https://dl-cdn.alpinelinux.org/alpine/latest-stable/main/x86/APKINDEX.tar.gz",
        "shaanos-core": "https://dl-os.shvn.tr/core/x86/APKINDEX.tar.gz",
    },
}

# highest priority first
DEFAULT_REPO_PRIORITY = [
    "shaanos-core",
    "alpine-main",
    "alpine-community",
]

DEFAULT_DISPLAY_NAMES = {
    "alpine-main": "Alpine Main",
    "alpine-community": "Alpine Community",
    "shaanos-core": "ShaanOS Core",
}

ORDERED_ARCHITECTURES = [
    "x86", "x86_64",
    "armhf", "armv7", "aarch64",
    "ppc64le", "s390x",
    "riscv64", "loongarch64",
]
N_ORDERED_ARCHITECTURES = len(ORDERED_ARCHITECTURES)
# fmt: on
