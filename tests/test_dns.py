import json

from crchost.dns import (
    DNS_SERVICE_PORT,
    DnsmasqConfValues,
    ResolverFileValues,
    create_dns_config_file,
    create_resolver_file,
    format_values,
    parse_lines,
    render_resolver_file,
)


def sample_values():
    return DnsmasqConfValues(
        base_domain="testing",
        cluster_name="crc",
        hostname="node0",
        ip="10.0.0.5",
        apps_domain="apps-crc.testing",
    )


def test_dns_config_fixed_lines():
    lines = create_dns_config_file(sample_values()).splitlines()
    assert lines[:5] == ["user=root", "port= 53", "bind-interfaces", "expand-hosts", "log-queries"]
    assert len(lines) == 13


def test_dns_config_addresses_point_at_ip():
    values = sample_values()
    text = create_dns_config_file(values)
    address_lines = [line for line in text.splitlines() if line.startswith("address=/")]
    assert len(address_lines) == 5
    assert all(line.endswith("/" + values.ip) for line in address_lines)
    assert f"address=/{values.apps_domain}/{values.ip}" in address_lines
    assert text.endswith("\n")


def test_dns_config_uses_cluster_domain():
    values = sample_values()
    text = create_dns_config_file(values)
    cluster = f"{values.cluster_name}.{values.base_domain}"
    assert f"domain={cluster}" in text.splitlines()
    assert f"local=/{cluster}/" in text.splitlines()
    assert f"address=/{values.hostname}.{cluster}/{values.ip}" in text


def test_render_resolver_file():
    text = render_resolver_file(ResolverFileValues(port=53, ip="192.168.64.2", search_order=1))
    assert text == "port 53\nnameserver 192.168.64.2\nsearch_order 1"


def test_create_resolver_file_writes_once(tmp_path):
    path = tmp_path / "testing"
    assert create_resolver_file("192.168.64.2", path) is True
    expected = render_resolver_file(ResolverFileValues(DNS_SERVICE_PORT, "192.168.64.2", 1))
    assert path.read_text() == expected
    assert create_resolver_file("192.168.64.2", path) is False


def test_create_resolver_file_rewrites_on_change(tmp_path):
    path = tmp_path / "testing"
    create_resolver_file("192.168.64.2", path)
    assert create_resolver_file("192.168.64.3", path) is True
    assert "nameserver 192.168.64.3" in path.read_text()


def test_format_values_round_trip():
    addresses = ["1.1.1.1", "8.8.8.8", "9.9.9.9"]
    assert json.loads("[" + format_values(addresses) + "]") == addresses


def test_format_values_empty():
    assert format_values([]) == ""


def test_parse_lines_strips_endings():
    assert parse_lines("a\r\nb\n") == ["a", "b"]


def test_parse_lines_keeps_inner_empty_lines():
    assert parse_lines("a\n\nb") == ["a", "", "b"]


def test_parse_lines_empty():
    assert parse_lines("") == []