"""
Gatherly Backend — Application Package
========================================

Layers:

    ┌─────────────────────────────────────┐
    │   Routes (API Layer)                │  ← HTTP concerns, Result → status
    ├─────────────────────────────────────┤
    │   Services (Workflows)              │  ← photo/activity/account logic,
    │                                     │    returns Result or None
    ├─────────────────────────────────────┤
    │   Repositories                      │  ← aggregate loading, unit of work
    ├─────────────────────────────────────┤
    │   Models & Schemas                  │  ← SQLAlchemy ORM + pydantic
    ├─────────────────────────────────────┤
    │   Database                          │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘

External collaborators (the image host, the caller's identity) reach the
services through small interfaces: MediaGateway and UserAccessor.
"""

__version__ = "1.0.0"
