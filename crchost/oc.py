"""Running the oc client against the cluster and reading its state."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable

from .osutil import CommandError, run_with_default_locale

logger = logging.getLogger(__name__)

OC_BINARY_NAME = "oc.exe" if sys.platform == "win32" else "oc"

IGNORED_CLUSTER_OPERATORS = ("monitoring", "machine-config", "marketplace")


class OcError(Exception):
    """An oc command failed or returned data that cannot be used."""


@dataclass
class OcConfig:
    """The oc binary together with the kubeconfig it should use.

    ``runner`` takes the command and its arguments and returns (stdout, stderr),
    raising CommandError on failure.
    """

    oc_binary_path: str
    kubeconfig_path: str
    runner: Callable[..., tuple[str, str]] = field(
        default=run_with_default_locale, repr=False, compare=False
    )

    def run_oc_command(self, *args: str) -> tuple[str, str]:
        """Run oc with ``args`` and the kubeconfig; return (stdout, stderr)."""
        return self.runner(self.oc_binary_path, *args, "--kubeconfig", self.kubeconfig_path)

    def approve_node_csr(self) -> None:
        """Approve every pending certificate signing request."""
        try:
            cert_names, _ = self.run_oc_command("get", "csr", "-oname")
        except CommandError as exc:
            raise OcError(f"Not able to get csr names ({exc} : {exc.stderr})") from exc

        for cert_name in cert_names.split("\n"):
            if not cert_name:
                continue
            try:
                self.run_oc_command("adm", "certificate", "approve", cert_name)
            except CommandError as exc:
                raise OcError(f"Not able to get csr names ({exc} : {exc.stderr})") from exc


def use_oc_with_config(
    machine_name: str,
    bin_dir: str | os.PathLike,
    machine_instance_dir: str | os.PathLike,
) -> OcConfig:
    """Return the oc binary in ``bin_dir`` with the kubeconfig of ``machine_name``."""
    return OcConfig(
        oc_binary_path=os.path.join(os.fspath(bin_dir), OC_BINARY_NAME),
        kubeconfig_path=os.path.join(os.fspath(machine_instance_dir), machine_name, "kubeconfig"),
    )


def _conditions(item: dict) -> list[dict]:
    status = item.get("status") or {}
    if not isinstance(status, dict):
        return []
    return [c for c in (status.get("conditions") or []) if isinstance(c, dict)]


def get_cluster_operator_status(oc: OcConfig) -> bool:
    """Return True when every relevant cluster operator is available and settled."""
    try:
        data, _ = oc.run_oc_command("get", "co", "-ojson")
    except CommandError as exc:
        raise OcError(f"{exc.stderr} - {exc}") from exc

    try:
        document = json.loads(data)
    except ValueError as exc:
        raise OcError(f"Cannot parse cluster operator list: {exc}") from exc
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise OcError("Cannot parse cluster operator list: not a JSON object")

    all_available = True
    for item in document.get("items") or []:
        if not isinstance(item, dict):
            continue
        name = (item.get("metadata") or {}).get("name", "")
        if name in IGNORED_CLUSTER_OPERATORS:
            continue
        for condition in _conditions(item):
            kind = condition.get("type", "")
            status = condition.get("status", "")
            reason = condition.get("reason", "")
            if kind == "Available":
                if status != "True":
                    logger.debug("%s operator not available, Reason: %s", name, reason)
                    all_available = False
            elif kind == "Degraded":
                if status != "False":
                    logger.debug("%s operator is degraded, Reason: %s", name, reason)
                    all_available = False
            elif kind == "Progressing":
                if status != "False":
                    logger.debug("%s operator is still progressing, Reason: %s", name, reason)
                    all_available = False
            else:
                logger.debug("Unexpected operator status for %s: %s", name, kind)
    return all_available