"""Operating-system helpers: platform detection, running commands, file copies."""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import sys
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class OS(str, Enum):
    """Supported host operating systems."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


class CommandError(Exception):
    """A command could not be started or exited unsuccessfully."""

    def __init__(self, message: str, stdout: str = "", stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


def current_os() -> OS:
    """Return the operating system this process runs on."""
    platform = sys.platform
    if platform == "win32":
        return OS.WINDOWS
    if platform == "darwin":
        return OS.DARWIN
    if platform.startswith("linux"):
        return OS.LINUX
    raise RuntimeError("Unexpected OS type")


def replace_env(variables: list[str], var_name: str, value: str) -> list[str]:
    """Replace the value of ``var_name`` in a list of ``NAME=value`` entries.

    Entries keep their position; a variable that is not present is not added.
    """
    return [
        f"{var_name}={value}" if entry.split("=", 1)[0] == var_name else entry
        for entry in variables
    ]


def _exit_message(returncode: int) -> str:
    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"


def _run(argv: list[str], env: dict[str, str] | None = None) -> tuple[str, str]:
    try:
        proc = subprocess.run(
            argv,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            env=env,
            check=False,
        )
    except OSError as exc:
        raise CommandError(str(exc)) from exc
    if proc.returncode != 0:
        raise CommandError(
            _exit_message(proc.returncode),
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )
    return proc.stdout, proc.stderr


def run_with_privilege(*args: str) -> tuple[str, str]:
    """Run a command through sudo and return its (stdout, stderr)."""
    sudo = shutil.which("sudo")
    if sudo is None:
        raise CommandError('exec: "sudo": executable file not found in $PATH')
    return _run([sudo, *args])


def run_with_default_locale(command: str, *args: str) -> tuple[str, str]:
    """Run a command with LC_ALL and LANG set to C and return its (stdout, stderr)."""
    variables = [f"{name}={val}" for name, val in os.environ.items()]
    variables = replace_env(variables, "LC_ALL", "C")
    variables = replace_env(variables, "LANG", "C")
    env = dict(entry.partition("=")[::2] for entry in variables)
    return _run([command, *args], env=env)


def current_executable() -> str:
    """Return the absolute path of the running executable."""
    executable = sys.executable
    if not executable:
        raise OSError("Cannot determine the current executable")
    return os.path.realpath(executable)


def copy_file_contents(src: str | os.PathLike, dst: str | os.PathLike, permission: int) -> None:
    """Copy the bytes of ``src`` into ``dst``, creating it with ``permission``."""
    logger.debug("Copying '%s' to '%s'", src, dst)
    try:
        src_file = open(src, "rb")
    except OSError as exc:
        raise OSError(f"[{exc}] Cannot open src file '{src}'") from exc

    with src_file:
        flags = os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(dst, flags, permission)
        except OSError as exc:
            raise OSError(f"[{exc}] Cannot create dst file '{dst}'") from exc

        with open(fd, "r+b") as dst_file:
            try:
                shutil.copyfileobj(src_file, dst_file)
                dst_file.flush()
            except OSError as exc:
                raise OSError(f"[{exc}] Cannot copy '{src}' to '{dst}'") from exc
            try:
                os.fsync(dst_file.fileno())
            except OSError as exc:
                raise OSError(f"[{exc}] Cannot sync '{src}' to '{dst}'") from exc


def write_file_if_content_changed(path: str | os.PathLike, content: bytes, perm: int) -> bool:
    """Write ``content`` to ``path`` unless it already holds exactly that.

    Returns True when the file was written.
    """
    try:
        old_content = Path(path).read_bytes()
    except OSError:
        old_content = None
    if old_content == content:
        return False

    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    fd = os.open(path, flags, perm)
    with open(fd, "wb") as handle:
        handle.write(content)
    return True