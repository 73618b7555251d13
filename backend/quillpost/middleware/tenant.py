"""
Quillpost Backend — Tenant Context Middleware
===============================================

What:  Works out which tenant a request belongs to.
How:   Fixed precedence over three sources, first match wins:
           1. X-Tenant-ID header          (API clients, first value if repeated)
           2. hostname subdomain          (acme.quillpost.io → "acme")
           3. configured default tenant   (DEFAULT_TENANT_ID, single-tenant installs)
       No match is not an error: the request continues without a tenant.
Who:   Applied to every request via Starlette middleware.
When:  After logging, before the guards (the feature gate reads the tenant).

Excluded paths (TENANT_EXCLUDED_PATHS) skip resolution entirely, matched
exactly or as "<path>/..." prefixes.

Failure mode:
    An unexpected exception while resolving becomes a 400 BAD_REQUEST
    rejection. The response is built here because this middleware sits
    outside FastAPI's exception handlers.
"""

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from quillpost.context import TenantInfo, TenantSource, get_request_context
from quillpost.exceptions import TenantResolutionError
from quillpost.policy import RESERVED_SUBDOMAINS, TENANT_EXCLUDED_PATHS

logger = logging.getLogger(__name__)

TENANT_HEADER = "x-tenant-id"
UNKNOWN_ERROR = "Unknown error occurred"

_IPV4_PATTERN = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")


def is_excluded_path(path: str, excluded_paths: Iterable[str] = TENANT_EXCLUDED_PATHS) -> bool:
    return any(path == excluded or path.startswith(f"{excluded}/") for excluded in excluded_paths)


def extract_subdomain(hostname: str, reserved: Iterable[str] = RESERVED_SUBDOMAINS) -> Optional[str]:
    """
    Return the tenant label of `hostname`, or None.

    Needs at least three labels (tenant.domain.tld). localhost, dotted-quad
    addresses and reserved labels yield None. The reserved check is exact
    and case-sensitive.
    """
    if hostname == "localhost" or _IPV4_PATTERN.match(hostname):
        return None

    parts = hostname.split(".")
    if len(parts) >= 3:
        subdomain = parts[0]
        if subdomain not in reserved:
            return subdomain
    return None


def first_header_value(headers: Mapping[str, Any], name: str) -> Optional[str]:
    """
    First value of a header that may have been sent more than once.

    Accepts Starlette Headers (repeated headers via getlist) or a plain
    mapping whose values are strings or lists of strings.
    """
    getlist = getattr(headers, "getlist", None)
    if getlist is not None:
        values = getlist(name)
        return values[0] if values else None

    value = headers.get(name)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def resolve_tenant(
    path: str,
    headers: Mapping[str, Any],
    hostname: str,
    default_tenant_id: Optional[str] = None,
    excluded_paths: Iterable[str] = TENANT_EXCLUDED_PATHS,
) -> Optional[TenantInfo]:
    """Apply exclusion, then header > subdomain > default precedence."""
    if is_excluded_path(path, excluded_paths):
        return None

    header_tenant = first_header_value(headers, TENANT_HEADER)
    if header_tenant:
        return TenantInfo(tenant_id=header_tenant, source=TenantSource.HEADER)

    subdomain = extract_subdomain(hostname)
    if subdomain:
        return TenantInfo(tenant_id=subdomain, subdomain=subdomain, source=TenantSource.SUBDOMAIN)

    if default_tenant_id:
        return TenantInfo(tenant_id=default_tenant_id, source=TenantSource.DEFAULT)

    return None


def request_hostname(request: Request) -> str:
    """
    Hostname from the Host header with the port removed, case preserved.

    request.url.hostname lowercases, which would hide mixed-case tenant
    labels, so the header is parsed directly.
    """
    host = request.headers.get("host")
    if not host:
        return request.url.hostname or ""
    if host.startswith("["):
        return host[1:host.find("]")]
    return host.split(":", 1)[0]


class TenantContextMiddleware(BaseHTTPMiddleware):
    """
    Resolves the tenant and stores it on the RequestContext.

    Response header:
        X-Tenant-ID is set to the resolved tenant id, and left unset when no
        tenant was resolved (excluded path, or no source applied).
    """

    def __init__(
        self,
        app,
        default_tenant_id: Optional[str] = None,
        excluded_paths: Iterable[str] = TENANT_EXCLUDED_PATHS,
    ):
        super().__init__(app)
        self.default_tenant_id = default_tenant_id
        self.excluded_paths = tuple(excluded_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = get_request_context(request)

        try:
            tenant = resolve_tenant(
                request.url.path,
                request.headers,
                request_hostname(request),
                self.default_tenant_id,
                self.excluded_paths,
            )
        except Exception as exc:
            rejection = TenantResolutionError(
                reason=str(exc) or UNKNOWN_ERROR,
                request_id=context.correlation_id,
            )
            logger.warning(
                "[%s] Tenant resolution failed: %s",
                rejection.request_id,
                rejection.reason,
                exc_info=True,
            )
            return JSONResponse(status_code=rejection.status_code, content=rejection.to_payload())

        context.tenant = tenant
        if tenant is not None:
            logger.debug(
                "[%s] Tenant context: %s (%s)",
                context.correlation_id,
                tenant.tenant_id,
                tenant.source.value,
            )

        response = await call_next(request)

        if tenant is not None:
            response.headers[TENANT_HEADER] = tenant.tenant_id
        return response
