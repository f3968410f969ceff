"""Persistent global state kept in a JSON file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

_O_BINARY = getattr(os, "O_BINARY", 0)


class StateError(Exception):
    """The state file could not be understood."""


@dataclass
class GlobalState:
    """State shared between runs; only ``dns_pid`` is stored in the file."""

    file_path: str
    dns_pid: int = 0

    def write(self) -> None:
        """Write the state to its file."""
        data = json.dumps({"DnsPID": self.dns_pid}, indent="\t").encode("utf-8")
        fd = os.open(self.file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC | _O_BINARY, 0o644)
        with open(fd, "wb") as handle:
            handle.write(data)

    def delete(self) -> None:
        """Remove the state file."""
        os.remove(self.file_path)

    def _read(self) -> None:
        with open(self.file_path, "rb") as handle:
            raw = handle.read()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise StateError("Invalid JSON") from exc
        if data is None:
            return
        if not isinstance(data, dict):
            raise StateError(f"cannot load state from a JSON {type(data).__name__}")
        for key, value in data.items():
            if key.lower() != "dnspid" or value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise StateError(f"DnsPID must be an integer, got {value!r}")
            self.dns_pid = value


def new_global_state(path: str | os.PathLike) -> GlobalState:
    """Load the state from ``path``, creating the file when it does not exist."""
    state = GlobalState(os.fspath(path))
    try:
        os.stat(state.file_path)
    except FileNotFoundError:
        state.write()
        return state
    except OSError:
        pass
    state._read()
    return state