"""Unpacking gzip, tar and zip archives."""

from __future__ import annotations

import gzip
import os
import shutil
import tarfile
import zipfile

_O_BINARY = getattr(os, "O_BINARY", 0)

_CREATOR_UNIX = 3
_CREATOR_MACOSX = 19
_CREATOR_MSDOS = {0, 11, 14}  # FAT, NTFS, VFAT


def ungzip(source: str | os.PathLike, target: str | os.PathLike) -> None:
    """Decompress the gzip file ``source`` into ``target``."""
    with gzip.open(source, "rb") as archive, open(target, "wb") as writer:
        shutil.copyfileobj(archive, writer)


def untar(tarball: str | os.PathLike, target_dir: str | os.PathLike) -> None:
    """Unpack the directories and regular files of an uncompressed tarball."""
    target_dir = os.fspath(target_dir)
    with tarfile.open(tarball, mode="r:") as archive:
        for member in archive:
            path = os.path.normpath(os.path.join(target_dir, member.name))
            if member.isdir():
                if not os.path.exists(path):
                    os.makedirs(path, 0o755, exist_ok=True)
            elif member.isreg():
                parent = os.path.dirname(path)
                if parent:
                    os.makedirs(parent, 0o770, exist_ok=True)
                fd = os.open(path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY | _O_BINARY, member.mode)
                with open(fd, "wb") as writer:
                    source = archive.extractfile(member)
                    if source is not None:
                        with source:
                            shutil.copyfileobj(source, writer)


def _zip_mode(info: zipfile.ZipInfo) -> int:
    if info.create_system in (_CREATOR_UNIX, _CREATOR_MACOSX):
        mode = (info.external_attr >> 16) & 0o7777
    elif info.create_system in _CREATOR_MSDOS:
        mode = 0o777 if info.external_attr & 0x10 else 0o666
        if info.external_attr & 0x01:
            mode &= ~0o222
    else:
        mode = 0
    return mode


def unzip(archive: str | os.PathLike, target: str | os.PathLike) -> None:
    """Unpack a zip archive into ``target``."""
    target = os.fspath(target)
    with zipfile.ZipFile(archive) as reader:
        os.makedirs(target, 0o755, exist_ok=True)
        for info in reader.infolist():
            path = os.path.normpath(os.path.join(target, info.filename))
            mode = _zip_mode(info)
            if info.is_dir():
                os.makedirs(path, mode, exist_ok=True)
                continue
            with reader.open(info) as source:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC | _O_BINARY, mode)
                with open(fd, "wb") as writer:
                    shutil.copyfileobj(source, writer)