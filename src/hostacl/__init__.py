"""hostacl — host-based allow/deny access control for web applications."""

__version__ = "0.1.0"
