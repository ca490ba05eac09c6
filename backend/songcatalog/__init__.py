"""
SongCatalog Backend: Application Package
=========================================

A small HTTP service for a music library catalog: songs with a group, a
title, a release date, lyrics and a link.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP binding only
    ├─────────────────────────────────────┤
    │         Services (Domain Logic)     │  ← verse splitting and paging
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← SQL, filters, ordering
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
