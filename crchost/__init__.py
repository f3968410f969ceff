"""Host preparation helpers: preflight checks, oc caching, systemd, DNS files and validation."""

__version__ = "1.0.0"