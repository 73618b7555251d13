"""
Quillpost Backend — Application Package Initializer
====================================================

What: Marks the `quillpost` directory as a Python package.
Who:  Imported by uvicorn (`quillpost.main:app`), pytest, and every module
      inside the package.

Architecture Note:
    The backend is a thin blog/CMS API wrapped in a request pipeline:

    ┌─────────────────────────────────────┐
    │   Middleware (request id, logging,  │  ← runs for every request
    │   tenant resolution)                │
    ├─────────────────────────────────────┤
    │   Guards (authentication, roles,    │  ← per-route policy checks
    │   feature flags)                    │
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Collaborators)    │  ← credential validation, articles
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
