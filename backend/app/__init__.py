"""
Userbase Backend — Application Package Initializer
===================================================

What:  Marks the `app` directory as a Python package.
Who:   Used by uvicorn, pytest, and the `userbase` console script.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Units of Work)       │  ← transaction boundaries
    ├─────────────────────────────────────┤
    │    Repositories (Persistence)       │  ← explicit SQLAlchemy queries
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Each layer receives its collaborator through its constructor; the whole
    graph is assembled once in main.create_app().
"""

__version__ = "1.0.0"
