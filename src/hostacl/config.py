"""Process configuration — env vars and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from hostacl.decision import AccessController
from hostacl.loader import load_rules


def _parse_trusted_proxies(value: str) -> dict[str, str]:
    """Parse ``ip=Header,ip=Header`` into a proxy address -> header mapping."""
    proxies: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        proxy, sep, header = item.partition("=")
        if not sep or not proxy.strip() or not header.strip():
            raise ValueError(f"Invalid trusted proxy entry: {item!r}")
        proxies[proxy.strip()] = header.strip()
    return proxies


@dataclass
class HostAclConfig:
    """Application-wide configuration."""

    rules_file: Path | None = None
    server_address: str | None = None
    username: str = ""
    trusted_proxies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls) -> HostAclConfig:
        """Load config from environment variables."""
        config = cls()

        env_rules = os.environ.get("HOSTACL_RULES_FILE")
        if env_rules:
            config.rules_file = Path(env_rules)

        # SERVER_ADDR is what CGI-style servers export for the bound address
        config.server_address = (
            os.environ.get("HOSTACL_SERVER_ADDR") or os.environ.get("SERVER_ADDR") or None
        )

        config.username = os.environ.get("HOSTACL_USER", "")

        env_proxies = os.environ.get("HOSTACL_TRUSTED_PROXIES")
        if env_proxies:
            config.trusted_proxies = _parse_trusted_proxies(env_proxies)

        return config

    def controller(self) -> AccessController:
        """Build an AccessController from the configured rules file."""
        if self.rules_file is None:
            raise ValueError("No rules file configured (set HOSTACL_RULES_FILE)")
        return AccessController(load_rules(self.rules_file), self.server_address)

    def middleware_kwargs(self) -> dict:
        """Keyword arguments for ``app.add_middleware(HostAclMiddleware, ...)``."""
        return {
            "controller": self.controller(),
            "username": self.username,
            "trusted_proxies": dict(self.trusted_proxies),
        }
