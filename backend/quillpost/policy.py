"""
Quillpost Backend — Static Policy Tables
==========================================

What:  The fixed tables the request pipeline consults: paths that skip
       tenant resolution, hostname labels that never name a tenant,
       feature flags, and the per-route access requirements.
How:   Plain immutable constants plus small lookup helpers. Nothing here is
       read from the environment; changing a policy is a code change.
Who:   TenantContextMiddleware, the guards, and enforce_endpoint_policy.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

# ── Tenant Resolution ─────────────────────────────────────────────────────
# Matched exactly or as a "<prefix>/" prefix; "/healthcheck" is NOT excluded.
TENANT_EXCLUDED_PATHS: Tuple[str, ...] = ("/health", "/api/public", "/api/auth/register")

# Case-sensitive: "WWW.example.com" yields tenant "WWW".
RESERVED_SUBDOMAINS: FrozenSet[str] = frozenset({"www", "api", "admin", "app"})


# ── Feature Flags ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FeaturePolicy:
    """Globally enabled flags plus tenants for which a flag is forced off."""

    enabled: FrozenSet[str]
    disabled_for_tenants: Mapping[str, FrozenSet[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def is_enabled(self, flag: str, tenant_id: Optional[str] = None) -> bool:
        if flag not in self.enabled:
            return False
        # An absent or empty tenant id is never excluded
        if tenant_id and tenant_id in self.disabled_for_tenants.get(flag, frozenset()):
            return False
        return True


FEATURE_POLICY = FeaturePolicy(
    enabled=frozenset({"new-dashboard", "beta-reports"}),
    disabled_for_tenants=MappingProxyType({"beta-reports": frozenset({"tenant-123"})}),
)


# ── Route Policies ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EndpointPolicy:
    """
    Access requirements for one route.

    public:  skip authentication entirely
    roles:   caller needs ANY one of these (empty = no restriction)
    feature: flag that must be enabled for the caller's tenant
    """

    public: bool = False
    roles: Tuple[str, ...] = ()
    feature: Optional[str] = None


# Routes missing from the table require authentication and nothing else.
DEFAULT_POLICY = EndpointPolicy()

# Keyed by route name (the `name=` given to each FastAPI route).
ROUTE_POLICIES: Mapping[str, EndpointPolicy] = MappingProxyType({
    "health_check": EndpointPolicy(public=True),
    "list_public_articles": EndpointPolicy(public=True),
    "list_articles": EndpointPolicy(),
    "get_article": EndpointPolicy(),
    "create_article": EndpointPolicy(roles=("editor", "admin")),
    "delete_article": EndpointPolicy(roles=("admin",)),
    "read_current_user": EndpointPolicy(),
    "read_reports": EndpointPolicy(roles=("admin",), feature="beta-reports"),
    "read_dashboard": EndpointPolicy(feature="new-dashboard"),
})


def policy_for(route_name: Optional[str]) -> EndpointPolicy:
    if route_name is None:
        return DEFAULT_POLICY
    return ROUTE_POLICIES.get(route_name, DEFAULT_POLICY)
