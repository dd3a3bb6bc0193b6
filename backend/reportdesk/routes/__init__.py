# Routes package init
"""
ReportDesk Backend — API Routes Package
=========================================

Route Inventory:
    - auth.py:     /api/auth/register, /api/auth/login, /api/auth/me
    - reports.py:  /api/reports (list, get, create, update, delete)
    - admin.py:    /api/admin/users, /api/admin/users/{id}/role, /api/admin/stats
    - content.py:  /api/content/... (public page fetch + admin page editing)
    - health.py:   /health

Routes stay thin: parse the request, call a service, shape the response.
Errors are raised as ReportDeskError subclasses and rendered by the handlers
registered in main.py.
"""
