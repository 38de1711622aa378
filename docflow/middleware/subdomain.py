"""
Subdomain Resolution Middleware

Marks each request as either a main-site request or an organization
subdomain request, based only on the Host header:

    docs.example.com   → subdomain request, organization slug "docs"
    www.example.com    → main site (reserved first label)
    example.com        → main site (fewer than three labels)

Resolution is purely syntactic: no database lookup, no DNS. Whether the slug
belongs to a public organization is decided later by the public routes.

Attributes set on request.state:
    subdomain         (str | None)
    is_subdomain      (bool)
    organization_slug (str | None)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from docflow.constants.subdomains import ROUTING_RESERVED_SUBDOMAINS

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubdomainContext:
    subdomain: str | None = None

    @property
    def is_subdomain(self) -> bool:
        return self.subdomain is not None

    @property
    def organization_slug(self) -> str | None:
        return self.subdomain


MAIN_DOMAIN = SubdomainContext()


def resolve_subdomain(host: str) -> SubdomainContext:
    """
    Extract the organization slug from a host name.

    Examples:
        "acme.example.com"      → SubdomainContext("acme")
        "docs.acme.example.com" → SubdomainContext("docs")
        "www.example.com"       → MAIN_DOMAIN
        "example.com"           → MAIN_DOMAIN
    """
    parts = host.split(".")
    if len(parts) < 3:
        return MAIN_DOMAIN

    candidate = parts[0].lower()
    if not candidate or candidate in ROUTING_RESERVED_SUBDOMAINS:
        return MAIN_DOMAIN
    return SubdomainContext(candidate)


class SubdomainMiddleware(BaseHTTPMiddleware):
    """Attach the resolved subdomain context to request.state."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = resolve_subdomain(request.headers.get("host", ""))

        request.state.subdomain = context.subdomain
        request.state.is_subdomain = context.is_subdomain
        request.state.organization_slug = context.organization_slug

        if context.is_subdomain:
            logger.debug("SubdomainMiddleware: resolved organization slug=%s", context.subdomain)

        return await call_next(request)
