[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crchost"
version = "1.0.0"
description = "Host preparation helpers for a local single-node cluster: Linux preflight checks, oc caching, systemd control, DNS configuration and validation."
requires-python = ">=3.10"
dependencies = []
keywords = ["cluster", "preflight", "systemd", "libvirt", "dnsmasq", "setup"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Installation/Setup",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["crchost"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
