"""Fetching a remote file to local disk."""

from __future__ import annotations

import http.client
import logging
import os
import shutil
import urllib.parse
import urllib.request

logger = logging.getLogger(__name__)


class DownloadError(Exception):
    """A download could not be completed."""


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def _target_path(destination: str, uri: str, response) -> str:
    is_dir = (
        destination == ""
        or os.path.isdir(destination)
        or destination.endswith(("/", os.sep))
    )
    if not is_dir:
        return destination

    name = None
    headers = getattr(response, "headers", None)
    if headers is not None and hasattr(headers, "get_filename"):
        name = headers.get_filename()
    if not name:
        name = urllib.parse.unquote(urllib.parse.urlparse(uri).path)
    name = os.path.basename(name.rstrip("/")) if name else ""
    if not name or name in (".", ".."):
        raise DownloadError(f"Download failed: no filename could be determined for {uri}")
    return os.path.join(destination, name)


def download(uri: str, destination: str | os.PathLike, mode: int) -> str:
    """Download ``uri`` to ``destination`` and set its mode.

    ``destination`` may be a file path or an existing directory, in which case
    the file name is taken from the response or the URL. Returns the path written.
    """
    destination = os.fspath(destination)
    logger.debug("Downloading %s to %s", uri, destination)
    try:
        response = urllib.request.urlopen(uri)
    except ValueError as exc:
        raise DownloadError(f"Not able to get response from {uri}: {exc}") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise DownloadError(f"Download failed: {exc}") from exc

    with response:
        filename = _target_path(destination, uri, response)
        try:
            with open(filename, "wb") as handle:
                shutil.copyfileobj(response, handle)
        except (OSError, http.client.HTTPException) as exc:
            _remove_quietly(filename)
            raise DownloadError(f"Download failed: {exc}") from exc

    try:
        os.chmod(filename, mode)
    except OSError:
        _remove_quietly(filename)
        raise

    logger.debug("Download saved to %s", filename)
    return filename