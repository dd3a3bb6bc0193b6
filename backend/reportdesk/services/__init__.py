"""
ReportDesk Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless singletons; every call receives the request's AsyncSession
       and, where it matters, the authenticated User.

Service Inventory:
    - AuthService:    registration, login, token issue
    - ReportService:  report CRUD with ownership and status rules
    - ContentService: versioned page store with history snapshots
    - UserService:    admin user management and statistics
"""
