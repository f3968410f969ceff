"""Validation of user-supplied settings."""

from __future__ import annotations

import ipaddress
import json
import os
from collections.abc import Sequence

from .version import get_bundle_version


class ValidationError(ValueError):
    """A setting is not valid."""


def validate_driver(driver: str, supported: Sequence[str]) -> None:
    """Check that ``driver`` is one of ``supported``."""
    if driver in supported:
        return
    listed = "[" + " ".join(supported) + "]"
    raise ValidationError(
        f"Unsupported driver: {driver}, use '--vm-driver' option to provide "
        f"a supported driver {listed}\n"
    )


def validate_cpus(value: int, minimum: int) -> None:
    """Check that at least ``minimum`` CPUs are requested."""
    if value < minimum:
        raise ValidationError(f"CPUs required >={minimum}")


def validate_memory(value: int, minimum: int) -> None:
    """Check that at least ``minimum`` memory is requested."""
    if value < minimum:
        raise ValidationError(f"Memory required >={minimum}")


def validate_path(path: str | os.PathLike) -> None:
    """Check that ``path`` exists."""
    try:
        os.stat(path)
    except FileNotFoundError as exc:
        raise ValidationError(f"File {os.fspath(path)} does not exist") from exc
    except OSError:
        pass


def validate_bundle(
    bundle: str | os.PathLike,
    bundle_version: str | None = None,
    embedded: bool = False,
) -> None:
    """Check that the bundle exists and matches the supported bundle version."""
    try:
        validate_path(bundle)
    except ValidationError as exc:
        if embedded:
            raise ValidationError("Run 'crc setup' to unpack the bundle to disk") from exc
        raise ValidationError(
            "You must provide the path to a valid bundle using the -b option"
        ) from exc

    release_version = get_bundle_version() if bundle_version is None else bundle_version
    name = os.path.basename(os.fspath(bundle).rstrip("/" + os.sep)) or os.fspath(bundle)
    if f"{release_version}.crcbundle" not in name:
        raise ValidationError(
            f"{name} bundle is not supported by this binary, "
            f"you must use crc_<hypervisor>_{release_version}.crcbundle"
        )


def validate_ip_address(ip_address: str) -> None:
    """Check that ``ip_address`` is an IPv4 address (IPv4-mapped IPv6 is accepted)."""
    try:
        ipaddress.IPv4Address(ip_address)
        return
    except ValueError:
        pass
    if "%" not in ip_address:
        try:
            if ipaddress.IPv6Address(ip_address).ipv4_mapped is not None:
                return
        except ValueError:
            pass
    raise ValidationError(f"IPv4 address is not valid: '{ip_address}'")


def _as_object(value, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(
            f"invalid pull secret: cannot unmarshal {type(value).__name__} into {what}"
        )
    return value


def image_pull_secret(secret: str) -> None:
    """Check that ``secret`` is a usable image pull secret."""
    try:
        data = json.loads(secret)
    except ValueError as exc:
        raise ValidationError(f"invalid pull secret: {exc}") from exc

    auths: dict = {}
    for key, value in _as_object(data, "pull secret").items():
        if key.lower() == "auths":
            auths = _as_object(value, "auths")
    if not auths:
        raise ValidationError("invalid pull secret, auths required")

    for domain, entry in auths.items():
        fields = _as_object(entry, "auth entry")
        if "auth" not in fields and "credsStore" not in fields:
            raise ValidationError(
                f"invalid pull secret, {json.dumps(domain)} requires either auth or credsStore"
            )