# Middleware package init
"""
Quillpost Backend — Middleware Package
========================================

What:  Cross-cutting stages applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Tenant] → [CORS/GZip] → Guards → Route Handler

    1. Request ID: opens the RequestContext and picks the correlation id
    2. Logging: logs arrival (and sanitized body) with that id
    3. Tenant: resolves the tenant the guards and handlers will see

    The order is reversed for responses:
    Response ← [Request ID] ← [Logging] ← [Tenant] ← ... ← Route Handler

    This means:
    - X-Request-ID is attached to every response, including rejections
    - X-Tenant-ID is attached whenever a tenant was resolved
    - Logging captures the final status and total duration
"""
