"""
Feed Backend — Application Package Initializer
================================================

What: Marks the `feed_backend` directory as a Python package.
Why:  Enables module imports like `from feed_backend.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is a small layered CRUD service:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← /feed, /auth, /health
    ├─────────────────────────────────────┤
    │   Services (FeedService, Intake)    │  ← validation, image storage
    ├─────────────────────────────────────┤
    │       Store, Models & Schemas       │  ← PostStore + SQLAlchemy + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The store handle is injected per request, so every layer can be
    exercised in isolation.
"""

__version__ = "1.0.0"
