"""
CaseFamily Backend: Application Package Initializer
======================================================

REST backend for case clients and the family relations between them,
stored in MongoDB.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← joins, cascade, validation
    ├─────────────────────────────────────┤
    │    Schemas & Document helpers       │  ← Pydantic + ObjectId mapping
    ├─────────────────────────────────────┤
    │     DocumentStore (Persistence)     │  ← PyMongo async client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
