# Routes package init
"""
Quillpost Backend — API Routes Package
========================================

Route Inventory:
    - health.py:   GET  /health
    - articles.py: GET/POST /api/articles, GET/DELETE /api/articles/{id},
                   GET /api/public/articles
    - account.py:  GET  /api/auth/me
    - insights.py: GET  /api/dashboard, GET /api/reports

Routes stay THIN and declare no access rules of their own. Each route's
`name` is its key in quillpost.policy.ROUTE_POLICIES.
"""
