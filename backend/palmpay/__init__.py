"""
PalmPay Backend — Application Package Initializer
==================================================

What: Marks the `palmpay` directory as a Python package.
Who:  Used by uvicorn (`palmpay.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a thin layered CRUD service for palm-vein payment kiosks:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, bearer auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← One ORM query (or a few) per call
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The only in-process state is the enrollment-token cache
    (see palmpay.enrollment).
"""

__version__ = "1.0.0"
