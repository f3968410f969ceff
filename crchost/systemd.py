"""Controlling systemd units on the host or inside an instance."""

from __future__ import annotations

import abc
import contextlib
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .osutil import CommandError, run_with_privilege


class Action(str, Enum):
    """A systemctl verb."""

    START = "start"
    STOP = "stop"
    RELOAD = "reload"
    RESTART = "restart"
    ENABLE = "enable"
    DISABLE = "disable"
    STATUS = "status"
    DAEMON_RELOAD = "daemon-reload"

    def __str__(self) -> str:
        return self.value


class State(Enum):
    """The state of a unit as reported by systemctl."""

    UNKNOWN = "unknown"
    RUNNING = "active (running)"
    STOPPED = "inactive (dead)"
    NOT_FOUND = "could not be found"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class SystemdError(Exception):
    """A systemctl command failed."""


def compare(text: str) -> State:
    """Work out the unit state from systemctl output."""
    for state in (State.RUNNING, State.STOPPED, State.NOT_FOUND):
        if state.value in text:
            return state
    return State.UNKNOWN


class SystemdCommander(abc.ABC):
    """Operations on systemd units."""

    @abc.abstractmethod
    def start(self, name: str) -> bool:
        """Start a unit."""

    @abc.abstractmethod
    def stop(self, name: str) -> bool:
        """Stop a unit."""

    @abc.abstractmethod
    def reload(self, name: str) -> bool:
        """Reload a unit."""

    @abc.abstractmethod
    def restart(self, name: str) -> bool:
        """Restart a unit."""

    @abc.abstractmethod
    def status(self, name: str) -> State:
        """Return the state of a unit."""

    @abc.abstractmethod
    def enable(self, name: str) -> bool:
        """Enable a unit."""

    @abc.abstractmethod
    def disable(self, name: str) -> bool:
        """Disable a unit."""

    @abc.abstractmethod
    def daemon_reload(self) -> bool:
        """Reload the systemd manager configuration."""


@dataclass
class HostSystemdCommander(SystemdCommander):
    """Runs systemctl on the host through sudo.

    ``runner`` takes the command and its arguments and returns (stdout, stderr),
    raising CommandError on failure.
    """

    runner: Callable[..., tuple[str, str]] = run_with_privilege

    def _service(self, name: str, action: Action) -> State:
        try:
            stdout, _ = self.runner("systemctl", action.value, name)
        except CommandError as exc:
            raise SystemdError(
                f"Executing systemctl action failed: {exc.stdout} {exc}: {exc.stderr}"
            ) from exc
        return compare(stdout)

    def enable(self, name: str) -> bool:
        self._service(name, Action.ENABLE)
        return True

    def disable(self, name: str) -> bool:
        self._service(name, Action.DISABLE)
        return True

    def daemon_reload(self) -> bool:
        try:
            self.runner("systemctl", Action.DAEMON_RELOAD.value)
        except CommandError as exc:
            raise SystemdError(
                f"Executing systemctl daemon-reload failed: {exc.stdout} {exc}: {exc.stderr}"
            ) from exc
        return True

    def _reload_then(self, name: str, action: Action) -> bool:
        with contextlib.suppress(SystemdError):
            self.daemon_reload()
        self._service(name, action)
        return True

    def reload(self, name: str) -> bool:
        return self._reload_then(name, Action.RELOAD)

    def restart(self, name: str) -> bool:
        return self._reload_then(name, Action.RESTART)

    def start(self, name: str) -> bool:
        return self._reload_then(name, Action.START)

    def stop(self, name: str) -> bool:
        self._service(name, Action.STOP)
        return True

    def status(self, name: str) -> State:
        return self._service(name, Action.STATUS)


@dataclass
class InstanceSystemdCommander:
    """Runs systemctl inside an instance over SSH.

    ``run_ssh`` takes a shell command line and returns its output.
    """

    run_ssh: Callable[[str], str]

    def _ssh(self, command: str) -> str:
        try:
            return self.run_ssh(command)
        except SystemdError:
            raise
        except Exception as exc:  # the SSH runner may fail in any way
            raise SystemdError(str(exc)) from exc

    def _service(self, name: str, action: Action) -> str:
        return self._ssh(f"sudo systemctl -f {action.value} {name}")

    def enable(self, name: str) -> bool:
        self._service(name, Action.ENABLE)
        return True

    def disable(self, name: str) -> bool:
        self._service(name, Action.DISABLE)
        return True

    def daemon_reload(self) -> bool:
        self._ssh("sudo systemctl daemon-reload")
        return True

    def _reload_then(self, name: str, action: Action) -> bool:
        with contextlib.suppress(SystemdError):
            self.daemon_reload()
        self._service(name, action)
        return True

    def restart(self, name: str) -> bool:
        return self._reload_then(name, Action.RESTART)

    def start(self, name: str) -> bool:
        return self._reload_then(name, Action.START)

    def stop(self, name: str) -> bool:
        self._service(name, Action.STOP)
        return True

    def status(self, name: str) -> str:
        return self._service(name, Action.STATUS)