"""
MindPad Backend — Application Package Initializer
==================================================

What: Marks the `mindpad` directory as a Python package.
Who:  Used by uvicorn (`uvicorn mindpad.main:app`), Alembic, pytest, and the
      headless client in `mindpad.client`.

Architecture Note:
    The service follows the same layered shape throughout:

    ┌─────────────────────────────────────┐
    │      Routes (API Layer)             │  ← HTTP concerns, CORS, redirects
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← notes, AI proxy, auth, realtime
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    `mindpad.client` sits on the other side of the HTTP boundary and holds the
    note list, editor, AI panel and session view-models.
"""

__version__ = "1.0.0"
