"""DNS configuration files for the cluster and the host."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

from .osutil import write_file_if_content_changed

DNS_SERVICE_PORT = 53
DNS_CONFIG_FILE_PATH_IN_INSTANCE = "/var/srv/dnsmasq.conf"
DNS_CONTAINER_IP = "10.88.0.8"
DNS_CONTAINER_IMAGE = "quay.io/crcont/dnsmasq:latest"
PUBLIC_DNS_QUERY_URI = "quay.io"


@dataclass(frozen=True)
class DnsmasqConfValues:
    """The values filled into the dnsmasq configuration."""

    base_domain: str
    cluster_name: str
    hostname: str
    ip: str
    apps_domain: str
    port: int = DNS_SERVICE_PORT


@dataclass(frozen=True)
class ResolverFileValues:
    """The values filled into a host resolver file."""

    port: int
    ip: str
    search_order: int


def create_dns_config_file(values: DnsmasqConfValues) -> str:
    """Render the dnsmasq configuration for the cluster."""
    cluster = f"{values.cluster_name}.{values.base_domain}"
    ip = values.ip
    return (
        "user=root\n"
        f"port= {values.port}\n"
        "bind-interfaces\n"
        "expand-hosts\n"
        "log-queries\n"
        f"srv-host=_etcd-server-ssl._tcp.{cluster},etcd-0.{cluster},2380,10\n"
        f"local=/{cluster}/\n"
        f"domain={cluster}\n"
        f"address=/{values.apps_domain}/{ip}\n"
        f"address=/etcd-0.{cluster}/{ip}\n"
        f"address=/api.{cluster}/{ip}\n"
        f"address=/api-int.{cluster}/{ip}\n"
        f"address=/{values.hostname}.{cluster}/{ip}\n"
    )


def render_resolver_file(values: ResolverFileValues) -> str:
    """Render a resolver file pointing a domain at a nameserver."""
    return (
        f"port {values.port}\n"
        f"nameserver {values.ip}\n"
        f"search_order {values.search_order}"
    )


def create_resolver_file(instance_ip: str, path: str | os.PathLike) -> bool:
    """Write the resolver file for ``instance_ip``; return True if it changed."""
    values = ResolverFileValues(port=DNS_SERVICE_PORT, ip=instance_ip, search_order=1)
    return write_file_if_content_changed(path, render_resolver_file(values).encode("utf-8"), 0o644)


def format_values(server_addresses: Iterable[str]) -> str:
    """Quote each address and join them with commas."""
    return ", ".join(f'"{address}"' for address in server_addresses)


def parse_lines(text: str) -> list[str]:
    """Split text into lines, dropping line endings and a final empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]