"""Shell detection and environment-setting snippets."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .osutil import OS, current_os


class UnsupportedShellError(Exception):
    """The shell is not supported or could not be detected."""


@dataclass(frozen=True)
class ShellConfig:
    """The pieces that make up a variable assignment in a shell."""

    prefix: str
    delimiter: str
    suffix: str
    path_suffix: str


def supported_shells() -> list[str]:
    """Return the shells supported on this operating system."""
    if current_os() is OS.WINDOWS:
        return ["cmd", "powershell"]
    return ["bash", "zsh"]


def is_supported_shell(user_shell: str) -> bool:
    """Return True if ``user_shell`` is supported here."""
    return user_shell in supported_shells()


def _detect() -> str:
    shell = os.environ.get("SHELL", "")
    if shell:
        return os.path.basename(shell)
    if current_os() is OS.WINDOWS:
        return "cmd"
    raise UnsupportedShellError("Cannot detect the shell: SHELL is not set")


def get_shell(user_shell: str) -> str:
    """Return the requested shell if supported, or the detected one when empty."""
    if user_shell:
        if not is_supported_shell(user_shell):
            raise UnsupportedShellError(
                f"'{user_shell}' is not a supported shell.\n"
                f"Supported shells are {', '.join(supported_shells())}."
            )
        return user_shell
    return _detect()


def generate_usage_hint(user_shell: str, cmd_line: str) -> str:
    """Return the hint telling the user how to apply ``cmd_line`` in their shell."""
    comment = "#"
    if user_shell == "powershell":
        cmd = f"& {cmd_line} | Invoke-Expression"
    elif user_shell == "cmd":
        cmd = f"\t@FOR /f \"tokens=*\" %i IN ('{cmd_line}') DO @call %i"
        comment = "REM"
    else:
        cmd = f"eval $({cmd_line})"
    return f"{comment} Run this command to configure your shell:\n{comment} {cmd}\n"


def get_prefix_suffix_delimiter_for_set(user_shell: str) -> ShellConfig:
    """Return how to set an environment variable in ``user_shell``."""
    if user_shell == "powershell":
        prefix = "$Env:"
        suffix = '"\n'
        return ShellConfig(prefix, ' = "', suffix, ";" + prefix + "PATH" + suffix)
    if user_shell == "cmd":
        suffix = "\n"
        return ShellConfig("SET ", "=", suffix, ";%PATH%" + suffix)
    suffix = '"\n'
    return ShellConfig("export ", '="', suffix, ":$PATH" + suffix)