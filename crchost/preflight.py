"""Host checks run before setup and start, with fixes for what can be repaired."""

from __future__ import annotations

import getpass
import logging
import os
import re
import shutil
import subprocess
from typing import Callable

from .osutil import CommandError, run_with_default_locale, run_with_privilege

logger = logging.getLogger(__name__)

LIBVIRT_DRIVER_COMMAND = "crc-driver-libvirt"
LIBVIRT_DRIVER_VERSION = "0.12.5"

CRC_DNSMASQ_CONFIG_FILE = "crc.conf"
CRC_NETWORK_MANAGER_CONFIG_FILE = "crc-nm-dnsmasq.conf"

CRC_DNSMASQ_CONFIG_PATH = os.path.join(
    os.sep, "etc", "NetworkManager", "dnsmasq.d", CRC_DNSMASQ_CONFIG_FILE
)
CRC_DNSMASQ_CONFIG = (
    "server=/crc.testing/192.168.130.1\n"
    "address=/apps-crc.testing/192.168.130.11\n"
)
CRC_NETWORK_MANAGER_CONFIG_PATH = os.path.join(
    os.sep, "etc", "NetworkManager", "conf.d", CRC_NETWORK_MANAGER_CONFIG_FILE
)
CRC_NETWORK_MANAGER_CONFIG = "[main]\ndns=dnsmasq\n"

_VIRSH = ("virsh", "--connect", "qemu:///system")


class PreflightError(Exception):
    """A preflight check or fix did not succeed."""


class PreflightFatal(PreflightError):
    """A required preflight check failed and the operation must stop."""


_FAILURES = (PreflightError, CommandError, OSError)

Check = Callable[[], object]


def _report(exc: BaseException, configured_to_warn: bool) -> bool:
    if configured_to_warn:
        logger.warning("%s", exc)
        return False
    raise PreflightFatal(str(exc)) from exc


def preflight_check_succeeds_or_fails(
    configured_to_skip: bool, check: Check, message: str, configured_to_warn: bool
) -> bool:
    """Run ``check``; return True if it passed, False if skipped or only warned.

    A failure that is not configured to warn raises PreflightFatal.
    """
    logger.info("%s", message)
    if configured_to_skip:
        logger.warning("Skipping above check ...")
        return False
    try:
        check()
    except _FAILURES as exc:
        return _report(exc, configured_to_warn)
    return True


def preflight_check_and_fix(
    configured_to_skip: bool,
    check: Check,
    fix: Check,
    message: str,
    configured_to_warn: bool,
) -> bool:
    """Run ``check`` and, if it fails, ``fix``.

    Returns True when the check or the fix succeeded, False if skipped or only
    warned. A failed fix that is not configured to warn raises PreflightFatal.
    """
    logger.info("%s", message)
    if configured_to_skip:
        logger.warning("Skipping above check ...")
        return False
    try:
        check()
        return True
    except _FAILURES as exc:
        logger.debug("%s", exc)
    try:
        fix()
    except _FAILURES as exc:
        return _report(exc, configured_to_warn)
    return True


def _exit_message(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"


def _run(*argv: str) -> None:
    """Run a command as is, raising CommandError with its stderr on failure."""
    try:
        proc = subprocess.run(list(argv), capture_output=True, text=True, check=False)
    except OSError as exc:
        raise CommandError(str(exc)) from exc
    if proc.returncode != 0:
        raise CommandError(
            _exit_message(proc.returncode),
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )


def _look_path(name: str) -> str:
    path = shutil.which(name)
    if path is None:
        raise PreflightError(f'exec: "{name}": executable file not found in $PATH')
    return path


def _current_username() -> str:
    try:
        return getpass.getuser()
    except Exception as exc:  # getuser may fail in several ways when no user is known
        raise PreflightError(f"Cannot determine the current user: {exc}") from exc


def check_virtualization_enabled(cpuinfo_path: str | os.PathLike = "/proc/cpuinfo") -> None:
    """Check that the CPU flags include vmx or svm."""
    logger.debug("Checking if the vmx/svm flags are present in /proc/cpuinfo")
    try:
        with open(cpuinfo_path, encoding="utf-8", errors="replace") as handle:
            content = handle.read()
    except OSError as exc:
        raise PreflightError(str(exc)) from exc

    flags = re.search(r"flags.*:.*", content)
    if flags is None or not flags.group(0):
        raise PreflightError("Could not find cpu flags from /proc/cpuinfo")
    if re.search(r"(vmx|svm)", flags.group(0)) is None:
        raise PreflightError("Virtualization is not available for you CPU")
    logger.debug("CPU virtualization flags are good")


def fix_virtualization_enabled() -> None:
    """Accept virtualization only if it is now available; it cannot be enabled from here."""
    try:
        check_virtualization_enabled()
    except PreflightError as exc:
        raise PreflightError("You need to enable virtualization in BIOS") from exc


def check_kvm_enabled(device_path: str | os.PathLike = "/dev/kvm") -> None:
    """Check that the kvm device exists."""
    logger.debug("Checking if /dev/kvm exists")
    try:
        os.stat(device_path)
    except FileNotFoundError as exc:
        raise PreflightError("kvm kernel module is not loaded") from exc
    except OSError:
        pass
    logger.debug("/dev/kvm was found")


def fix_kvm_enabled() -> None:
    """Load the kvm kernel module."""
    logger.debug("Trying to load kvm module")
    try:
        _run("modprobe", "kvm")
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    logger.debug("kvm module loaded")


def check_libvirt_installed() -> None:
    """Check that virsh is on the path."""
    logger.debug("Checking if 'virsh' is available")
    path = shutil.which("virsh")
    if path is None:
        raise PreflightError("Libvirt cli virsh was not found in path")
    logger.debug("'virsh' was found in %s", path)


def fix_libvirt_installed() -> None:
    """Install libvirt and its dependencies with yum."""
    logger.debug("Trying to install libvirt")
    try:
        run_with_privilege("yum", "install", "-y", "libvirt", "libvirt-daemon-kvm", "qemu-kvm")
    except CommandError as exc:
        raise PreflightError(
            f"Could not install required packages: {exc.stdout} {exc}: {exc.stderr}"
        ) from exc
    logger.debug("libvirt was successfully installed")


def check_libvirt_enabled() -> None:
    """Check that libvirtd.service is enabled."""
    logger.debug("Checking if libvirtd.service is enabled")
    try:
        path = _look_path("systemctl")
    except PreflightError as exc:
        raise PreflightError(f"systemctl not found on path: {exc}") from exc
    try:
        stdout, _ = run_with_default_locale(path, "is-enabled", "libvirtd")
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    if stdout.strip() != "enabled":
        raise PreflightError("libvirtd.service is not enabled")
    logger.debug("libvirtd.service is already enabled")


def fix_libvirt_enabled() -> None:
    """Enable libvirtd.service."""
    logger.debug("Enabling libvirtd.service")
    path = _look_path("systemctl")
    try:
        run_with_privilege(path, "enable", "libvirtd")
    except CommandError as exc:
        raise PreflightError(f"{exc.stdout}, {exc} : {exc.stderr}") from exc
    logger.debug("libvirtd.service is enabled")


def check_user_part_of_libvirt_group() -> None:
    """Check that the current user belongs to the libvirt group."""
    logger.debug("Checking if current user is part of the libvirt group")
    username = _current_username()
    path = _look_path("groups")
    try:
        stdout, _ = run_with_default_locale(path, username)
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    if "libvirt" in stdout:
        logger.debug("Current user is already in the libvirt group")
        return
    raise PreflightError(f"{username} not part of libvirtd group")


def fix_user_part_of_libvirt_group() -> None:
    """Add the current user to the libvirt group."""
    logger.debug("Adding current user to the libvirt group")
    username = _current_username()
    try:
        run_with_privilege("usermod", "-a", "-G", "libvirt", username)
    except CommandError as exc:
        raise PreflightError(f"{exc.stdout} {exc} : {exc.stderr}") from exc
    logger.debug("Current user is in the libvirt group")


def _check_service_active(unit: str) -> None:
    path = _look_path("systemctl")
    try:
        stdout, _ = run_with_default_locale(path, "is-active", unit)
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    if stdout.strip() != "active":
        raise PreflightError(f"{unit}.service is not running")


def check_libvirt_service_running() -> None:
    """Check that libvirtd.service is active."""
    logger.debug("Checking if libvirtd.service is running")
    _check_service_active("libvirtd")
    logger.debug("libvirtd.service is already running")


def fix_libvirt_service_running() -> None:
    """Start libvirtd.service."""
    logger.debug("Starting libvirtd.service")
    path = _look_path("systemctl")
    try:
        run_with_privilege(path, "start", "libvirtd")
    except CommandError as exc:
        raise PreflightError(f"{exc.stdout} {exc} : {exc.stderr}") from exc
    logger.debug("libvirtd.service is running")


def check_machine_driver_libvirt_installed(bin_dir: str | os.PathLike) -> None:
    """Check that the libvirt machine driver in ``bin_dir`` is executable and current."""
    logger.debug("Checking if %s is installed", LIBVIRT_DRIVER_COMMAND)
    driver_path = os.path.join(os.fspath(bin_dir), LIBVIRT_DRIVER_COMMAND)
    if not os.access(driver_path, os.X_OK):
        logger.debug("%s not executable", driver_path)
        raise PreflightError(f"{driver_path} not executable")

    try:
        stdout, stderr = run_with_default_locale(driver_path, "version")
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    if LIBVIRT_DRIVER_VERSION not in stdout:
        raise PreflightError(
            f"crc-driver-libvirt does not have right version \n Required: "
            f"{LIBVIRT_DRIVER_VERSION} \n Got: {stdout} use 'crc setup' command.\n {stderr}\n"
        )
    logger.debug("%s is already installed in %s", LIBVIRT_DRIVER_COMMAND, driver_path)


def check_libvirt_crc_network_active() -> None:
    """Check that the libvirt 'crc' network is listed as active."""
    logger.debug("Checking if libvirt 'crc' network is active")
    try:
        stdout, _ = run_with_default_locale(*_VIRSH, "net-list")
    except CommandError as exc:
        raise PreflightError(f"{exc}: {exc.stderr}") from exc
    for line in stdout.split("\n"):
        line = line.strip()
        if line.startswith("crc") and "active" in line:
            logger.debug("libvirt 'crc' network is already active")
            return
    raise PreflightError("Libvirt crc network is not active")


def fix_libvirt_crc_network_active() -> None:
    """Start the libvirt 'crc' network and mark it to start automatically."""
    logger.debug("Starting libvirt 'crc' network")
    try:
        _run(*_VIRSH, "net-start", "crc")
    except CommandError as exc:
        raise PreflightError(f"{exc} : {exc.stderr}") from exc
    try:
        _run(*_VIRSH, "net-autostart", "crc")
    except CommandError as exc:
        raise PreflightError(str(exc)) from exc
    logger.debug("libvirt 'crc' network started")


def check_config_file(path: str | os.PathLike, expected: str | bytes) -> None:
    """Check that the file at ``path`` holds exactly ``expected``."""
    if isinstance(expected, str):
        expected = expected.encode("utf-8")
    try:
        os.stat(path)
    except OSError as exc:
        raise PreflightError(f"File not found: {os.fspath(path)}: {exc}") from exc
    try:
        with open(path, "rb") as handle:
            content = handle.read()
    except OSError as exc:
        raise PreflightError(f"Error opening file: {os.fspath(path)}: {exc}") from exc
    if content != expected:
        raise PreflightError(f"Config file contains changes: {os.fspath(path)}")


def check_crc_dnsmasq_config_file(path: str | os.PathLike = CRC_DNSMASQ_CONFIG_PATH) -> None:
    """Check the dnsmasq configuration written for the cluster."""
    logger.debug("Checking dnsmasq configuration")
    check_config_file(path, CRC_DNSMASQ_CONFIG)
    logger.debug("dnsmasq configuration is good")


def check_crc_network_manager_config(
    path: str | os.PathLike = CRC_NETWORK_MANAGER_CONFIG_PATH,
) -> None:
    """Check the NetworkManager configuration that enables dnsmasq."""
    logger.debug("Checking NetworkManager configuration")
    check_config_file(path, CRC_NETWORK_MANAGER_CONFIG)
    logger.debug("NetworkManager configuration is good")


def check_network_manager_installed() -> None:
    """Check that nmcli is on the path."""
    logger.debug("Checking if 'nmcli' is available")
    path = shutil.which("nmcli")
    if path is None:
        raise PreflightError("NetworkManager cli nmcli was not found in path")
    logger.debug("'nmcli' was found in %s", path)


def fix_network_manager_installed() -> None:
    """Accept NetworkManager only if it is now installed; it must be installed by hand."""
    try:
        check_network_manager_installed()
    except PreflightError as exc:
        raise PreflightError(
            "NetworkManager is required and must be installed manually"
        ) from exc


def check_network_manager_is_running() -> None:
    """Check that NetworkManager.service is active."""
    logger.debug("Checking if NetworkManager.service is running")
    _check_service_active("NetworkManager")
    logger.debug("NetworkManager.service is already running")


def fix_network_manager_is_running() -> None:
    """Accept NetworkManager only if it is now running; it must be started by hand."""
    try:
        check_network_manager_is_running()
    except PreflightError as exc:
        raise PreflightError(
            "NetworkManager is required. Please make sure it is installed and running manually"
        ) from exc