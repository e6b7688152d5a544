"""Index archive fetching for APK repositories."""

import io
import logging
import tarfile
import zlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from os import utime
from pathlib import Path
from urllib.parse import urlparse

import aiofiles
import httpx

from apkcatalog.constants import INDEX_MEMBER_NAME, REPOS_DIR
from apkcatalog.exceptions import FetchError
from apkcatalog.utils import try_parse_date

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def url_to_local_path(url: str, cache_dir: Path | None = None) -> Path:
    """Convert a repository URL to a local file path that mirrors the source structure.

    Args:
        url: The full URL to a file
        cache_dir: Cache root, defaults to REPOS_DIR

    Examples:
        >>> url_to_local_path("https://dl-cdn.alpinelinux.org/alpine/v3.20/main/x86_64/APKINDEX.tar.gz", Path("c"))
        PosixPath('c/dl-cdn.alpinelinux.org/alpine/v3.20/main/x86_64/APKINDEX.tar.gz')
    """
    parsed = urlparse(url)
    return (cache_dir or REPOS_DIR) / parsed.netloc / parsed.path.lstrip("/")


class SkipMode(str, Enum):
    """File download skip modes.
    FAST: Skip download if local file exists.
    CHECK: Check Last-Modified and Content-Length headers to decide.
    NONE: Always download.
    """

    FAST = "fast"
    CHECK = "check"
    NONE = "none"


@asynccontextmanager
async def _client_scope(client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(follow_redirects=True, timeout=DEFAULT_TIMEOUT) as owned:
        yield owned


async def _is_up_to_date(client: httpx.AsyncClient, url: str, local_path: Path) -> bool:
    try:
        response = await client.head(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Unable to check remote mtime or size for {url}: {e}")
        return False

    if last_modified := try_parse_date(response.headers.get("last-modified")):
        # allow a second for fs granularity
        return last_modified.timestamp() <= local_path.stat().st_mtime + 1
    if remote_size := response.headers.get("content-length"):
        return remote_size.isdigit() and int(remote_size) == local_path.stat().st_size
    return False


async def download_archive(
    url: str,
    output_path: Path,
    *,
    client: httpx.AsyncClient | None = None,
    skip_mode: SkipMode = SkipMode.CHECK,
) -> Path:
    """Download an index archive to a local path unless the cached copy is current.

    Args:
        url: The URL to download from
        output_path: Where to save the downloaded file
        client: Optional shared HTTP client
        skip_mode: The mode for skipping downloads if the file exists

    Returns:
        The path of the local copy

    Raises:
        FetchError: If the archive could not be downloaded
    """
    existing = output_path.is_file()
    if existing and skip_mode == SkipMode.FAST:
        logger.debug(f"Skipping download, file already exists: {output_path}")
        return output_path

    async with _client_scope(client) as http:
        if existing and skip_mode == SkipMode.CHECK and await _is_up_to_date(http, url, output_path):
            logger.debug(f"Skipping download, local copy is current: {output_path}")
            return output_path

        try:
            response = await http.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url,
                f"HTTP {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(output_path, "wb") as f:
            await f.write(response.content)
    except OSError as e:
        raise FetchError(url, f"unable to cache archive at {output_path}: {e}") from e

    if last_modified := try_parse_date(response.headers.get("last-modified")):
        remote_ts = last_modified.timestamp()
        utime(output_path, (remote_ts, remote_ts))

    logger.debug(f"Downloaded {url} to {output_path}")
    return output_path


def extract_index_text(data: bytes, url: str = "<archive>") -> str:
    """Pull the APKINDEX member out of a gzip-compressed tar archive.

    Signed indexes are two concatenated gzip streams (signature, then index),
    which tarfile reads as one archive.

    Raises:
        FetchError: If the archive is corrupt or has no APKINDEX member
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            for member in archive:
                if member.name != INDEX_MEMBER_NAME:
                    continue
                handle = archive.extractfile(member)
                if handle is None:
                    raise FetchError(url, f"{INDEX_MEMBER_NAME} is not a regular file")
                return handle.read().decode("utf-8", errors="replace")
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise FetchError(url, f"unable to unpack archive: {e}") from e

    raise FetchError(url, f"{INDEX_MEMBER_NAME} not found in archive")


async def fetch_index_lines(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    skip_mode: SkipMode = SkipMode.CHECK,
    cache_dir: Path | None = None,
) -> list[str]:
    """Fetch an APKINDEX.tar.gz and return the decompressed index as lines.

    Raises:
        FetchError: On network errors, non-success responses or unpacking errors
    """
    local_path = await download_archive(
        url,
        url_to_local_path(url, cache_dir),
        client=client,
        skip_mode=skip_mode,
    )
    try:
        async with aiofiles.open(local_path, "rb") as f:
            data = await f.read()
    except OSError as e:
        raise FetchError(url, f"unable to read cached archive {local_path}: {e}") from e

    return extract_index_text(data, url).split("\n")
