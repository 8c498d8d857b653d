"""Retrieval of published crate sources used as semver baselines."""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path, PurePosixPath

import httpx

from cratesmith.errors import BaselineFetchError

logger = logging.getLogger(__name__)


class BaselineStore:
    """Download-once cache of published crate sources.

    Crates are unpacked to ``<cache_dir>/<name>-<version>``; a directory that
    already exists is reused as is.

    Attributes:
        cache_dir: Directory holding unpacked crates.
        download_url: Registry download API base URL.
        timeout: HTTP timeout in seconds.
    """

    def __init__(
        self,
        cache_dir: Path,
        download_url: str = "https://crates.io/api/v1/crates",
        *,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.cache_dir = cache_dir
        self.download_url = download_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def url_for(self, name: str, version: str) -> str:
        return f"{self.download_url}/{name}/{version}/download"

    def path_for(self, name: str, version: str) -> Path:
        return self.cache_dir / f"{name}-{version}"

    def fetch(self, name: str, version: str) -> Path:
        """Get the unpacked source of a published crate version.

        Args:
            name: Crate name.
            version: Published version.

        Returns:
            Directory containing the crate's Cargo.toml.

        Raises:
            BaselineFetchError: If the download or extraction fails.
        """
        extract_path = self.path_for(name, version)
        if extract_path.exists():
            logger.debug("Using cached baseline %s", extract_path)
            return extract_path

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        url = self.url_for(name, version)
        logger.info("Downloading baseline %s-%s from %s", name, version, url)

        try:
            content = self._download(url)
        except httpx.HTTPError as e:
            raise BaselineFetchError(name, version, str(e)) from e

        self._unpack(content, name, version)
        if not extract_path.is_dir():
            raise BaselineFetchError(name, version, f"archive did not contain {extract_path.name}/")
        return extract_path

    def _download(self, url: str) -> bytes:
        if self._client is not None:
            response = self._client.get(url)
            response.raise_for_status()
            return response.content

        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.content

    def _unpack(self, content: bytes, name: str, version: str) -> None:
        prefix = f"{name}-{version}"
        try:
            with tarfile.open(fileobj=io.BytesIO(content), mode="r:gz") as archive:
                members = [m for m in archive.getmembers() if _is_safe_member(m, prefix)]
                archive.extractall(self.cache_dir, members=members)
        except (tarfile.TarError, OSError) as e:
            raise BaselineFetchError(name, version, f"invalid archive: {e}") from e


def _is_safe_member(member: tarfile.TarInfo, prefix: str) -> bool:
    """Only regular files and directories below ``prefix/`` are extracted."""
    if not (member.isfile() or member.isdir()):
        return False
    path = PurePosixPath(member.name)
    if path.is_absolute() or ".." in path.parts:
        return False
    return bool(path.parts) and path.parts[0] == prefix
