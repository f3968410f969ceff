# crchost

Helpers for preparing a host to run a local single-node cluster in a
virtual machine. It is a library: every piece is a function or class to
call from your own setup tool.

## Modules

- `crchost.preflight` — Linux host checks: CPU virtualization flags
  (`check_virtualization_enabled`), the KVM device (`check_kvm_enabled`,
  `fix_kvm_enabled`), libvirt installed, enabled and running, the user's
  membership of the libvirt group, the libvirt machine driver version,
  the libvirt `crc` network being active, NetworkManager installed and
  running, and the dnsmasq / NetworkManager configuration files
  (`check_config_file`, `check_crc_dnsmasq_config_file`,
  `check_crc_network_manager_config`). Failed checks raise
  `PreflightError`. The runners `preflight_check_succeeds_or_fails` and
  `preflight_check_and_fix` log the message, skip when told to, try the
  fix when the check fails, and either log a warning or raise
  `PreflightFatal`.
- `crchost.oc` — `OcConfig` runs the `oc` client with a machine's
  kubeconfig (`use_oc_with_config`), approves pending node CSRs
  (`approve_node_csr`), and `get_cluster_operator_status` reports whether
  all cluster operators (except monitoring, machine-config and
  marketplace) are available, not degraded and not progressing.
- `crchost.oc_cache` — `OcCached` downloads the `oc` archive (tar.gz or
  zip), unpacks it and installs the binary into a bin directory unless it
  is already there (`is_cached`, `ensure_is_cached`).
- `crchost.systemd` — `HostSystemdCommander` runs `systemctl` through
  `sudo`; `InstanceSystemdCommander` runs it through an SSH callable you
  supply. Also the `Action` and `State` enums and `compare()`, which reads
  a unit's state from `systemctl` output. Failures raise `SystemdError`.
- `crchost.dns` — renders the dnsmasq configuration for the cluster
  (`create_dns_config_file` with `DnsmasqConfValues`) and a host resolver
  file (`render_resolver_file`, `create_resolver_file`), plus
  `format_values` and `parse_lines`.
- `crchost.validation` — `validate_driver`, `validate_cpus`,
  `validate_memory`, `validate_bundle`, `validate_ip_address`,
  `validate_path` and `image_pull_secret`, raising `ValidationError`.
- `crchost.shell` — supported shells per OS, `get_shell`,
  `generate_usage_hint` and `get_prefix_suffix_delimiter_for_set`
  (returns a `ShellConfig`).
- `crchost.state` — `GlobalState`, a small JSON file holding `dns_pid`;
  `new_global_state` loads it or creates it.
- `crchost.download` — `download()` fetches a URL to a file or directory
  with the standard library and sets its mode.
- `crchost.extract` — `ungzip`, `untar`, `unzip`.
- `crchost.osutil` — `current_os`, `replace_env`, `run_with_privilege`,
  `run_with_default_locale` (raise `CommandError`), `copy_file_contents`,
  `write_file_if_content_changed`.
- `crchost.output` — `out`, `out_f`, `out_w`.
- `crchost.version` — `get_crc_version`, `get_commit_sha`,
  `get_bundle_version`.

## Install

```
pip install .
```

## Example

```python
from crchost.validation import validate_ip_address, ValidationError
from crchost.shell import generate_usage_hint
from crchost.systemd import compare, State

validate_ip_address("192.168.130.11")

try:
    validate_ip_address("not-an-ip")
except ValidationError as err:
    print(err)

print(generate_usage_hint("bash", "mytool env"))
assert compare("Active: active (running) since ...") is State.RUNNING
```

## What it does not do

- There is no command-line program and no single "set up the host" or
  "start the cluster" routine; you call the checks and fixes yourself.
- It does not create, start or stop virtual machines, and it does not
  write the dnsmasq or NetworkManager configuration files, define the
  libvirt network or install the machine driver; it only checks them.
- Preflight checks cover Linux only; there are none for macOS or Windows
  hypervisors.
- It does not edit the host's hosts file or change a network interface's
  nameservers.

## Tests

```
pip install .[test]
pytest
```