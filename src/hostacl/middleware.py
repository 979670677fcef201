"""FastAPI/Starlette middleware — reject requests the active rule set denies."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from hostacl.decision import AccessController

logger = logging.getLogger(__name__)

UsernameGetter = Callable[[Request], str | None]


def client_address(
    request: Request,
    trusted_proxies: Mapping[str, str] | None = None,
) -> str | None:
    """Return the requesting address, or None when it cannot be determined.

    When the direct peer is a trusted proxy, the first address of the header
    configured for that proxy is used instead. That is only safe when the proxy
    overwrites the header; a proxy that appends to a client-supplied
    X-Forwarded-For lets the client choose the address checked here.
    """
    direct = request.client.host if request.client else None
    if not direct:
        return None

    header = (trusted_proxies or {}).get(direct)
    if header is None:
        return direct

    forwarded = request.headers.get(header, "")
    first = forwarded.split(",")[0].strip()
    return first or None


class HostAclMiddleware(BaseHTTPMiddleware):
    """Answer 403 for any request the controller does not allow."""

    def __init__(
        self,
        app,
        controller: AccessController,
        username: str = "",
        username_getter: UsernameGetter | None = None,
        trusted_proxies: Mapping[str, str] | None = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self._controller = controller
        self._username = username
        self._username_getter = username_getter
        self._trusted_proxies = dict(trusted_proxies or {})

    async def dispatch(self, request: Request, call_next):
        address = client_address(request, self._trusted_proxies)
        username = (
            self._username_getter(request)
            if self._username_getter is not None
            else self._username
        )

        decision = self._controller.decide(address, username)
        if not decision.allowed:
            logger.warning(
                "Blocked request from %s (user %r): %s",
                address,
                username,
                decision.reason,
            )
            return JSONResponse({"detail": "Forbidden"}, status_code=403)

        return await call_next(request)
