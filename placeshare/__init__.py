"""
PlaceShare Backend: Application Package
=======================================

What: Location-sharing API where users publish places (title, description,
      geocoded address, image) that they own.
Who:  Imported by uvicorn (placeshare.main:app), Alembic and pytest.

Layering:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (workflows, guards)      │  ← Orchestration, Result values
    ├─────────────────────────────────────┤
    │   Repositories (per-session CRUD)   │  ← Place / User / membership rows
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async engine, sessions, units
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
