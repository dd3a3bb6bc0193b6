"""
ReportDesk Backend — Application Package
=========================================

What: Server report tracker with user accounts, an admin panel and
      admin-editable, versioned page content.
Who:  Imported by uvicorn (`reportdesk.main:app`), Alembic, the scripts in
      `backend/scripts/` and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Middleware / Auth dependencies     │  ← bearer token, role gate
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, ownership, versioning
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
