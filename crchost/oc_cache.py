"""Downloading and caching the oc binary."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from typing import Callable

from .download import download
from .extract import ungzip, untar, unzip
from .oc import OC_BINARY_NAME
from .osutil import copy_file_contents

logger = logging.getLogger(__name__)

OC_CACHE_DIR = "oc"
TAR = "tar.gz"
ZIP = "zip"


class OcCacheError(Exception):
    """The oc binary could not be cached."""


def list_dir_excluding(directory: str | os.PathLike, exclude_pattern: str) -> list[str]:
    """Return the sorted entry names of ``directory`` that do not match the pattern."""
    try:
        regex = re.compile(exclude_pattern)
    except re.error as exc:
        raise OcCacheError(f"Invalid pattern '{exclude_pattern}': {exc}") from exc
    return [name for name in sorted(os.listdir(directory)) if not regex.search(name)]


@dataclass
class OcCached:
    """The oc binary kept in ``bin_dir``, fetched from ``download_url`` when missing.

    ``downloader`` takes (uri, destination directory, mode) and returns the path written.
    """

    bin_dir: str
    download_url: str
    binary_name: str = OC_BINARY_NAME
    downloader: Callable[[str, str, int], str] = field(default=download, repr=False, compare=False)

    @property
    def binary_path(self) -> str:
        return os.path.join(self.bin_dir, self.binary_name)

    def is_cached(self) -> bool:
        """Return True if the oc binary is already in place."""
        try:
            os.stat(self.binary_path)
        except FileNotFoundError:
            return False
        except OSError:
            pass
        return True

    def ensure_is_cached(self) -> None:
        """Download and install the oc binary unless it is already cached."""
        if not self.is_cached():
            self._cache_oc()

    def _extract(self, asset: str, tmp_dir: str) -> str:
        if asset.endswith(TAR):
            tar_file = asset[:-3]
            try:
                ungzip(asset, tar_file)
            except Exception as exc:
                raise OcCacheError(f"Cannot ungzip '{asset}': {exc}") from exc
            try:
                untar(tar_file, tmp_dir)
            except Exception as exc:
                raise OcCacheError(f"Cannot untar '{tar_file}': {exc}") from exc
            try:
                content = list_dir_excluding(tmp_dir, ".*.tar.*")
            except OSError as exc:
                raise OcCacheError(f"Cannot list content of '{tmp_dir}': {exc}") from exc
            if len(content) > 1:
                raise OcCacheError(f"Unexpected number of files in tmp directory: {content}")
            return tmp_dir
        if asset.endswith(ZIP):
            content_dir = asset[:-4]
            try:
                unzip(asset, content_dir)
            except Exception as exc:
                raise OcCacheError(f"Cannot unzip '{asset}': {exc}") from exc
            return content_dir
        return ""

    def _cache_oc(self) -> None:
        if self.is_cached():
            return
        logger.debug("Downloading oc")
        with tempfile.TemporaryDirectory(prefix="crc") as tmp_dir:
            asset = self.downloader(self.download_url, tmp_dir, 0o600)
            source = os.path.join(self._extract(asset, tmp_dir), self.binary_name)

            try:
                os.makedirs(self.bin_dir, 0o755, exist_ok=True)
            except OSError as exc:
                raise OcCacheError(f"Cannot create the target directory.: {exc}") from exc

            final_path = self.binary_path
            copy_file_contents(source, final_path, 0o755)

        try:
            os.chmod(final_path, 0o777)
        except OSError as exc:
            raise OcCacheError(f"Cannot make '{final_path}' executable: {exc}") from exc