"""
Firenotes — Application Package Initializer
============================================

What: Notes and products for signed-in users, backed by Firebase
      Authentication and a document store (Cloud Firestore, or SQL for
      local runs and tests).
Who:  Imported by uvicorn (firenotes.main:app), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │   Routes (auth, home, health)       │  ← screen actions, navigation
    ├─────────────────────────────────────┤
    │   HomeController / StateCells       │  ← per-client view state
    ├─────────────────────────────────────┤
    │   IdentityGateway  RecordGateway    │  ← uniform result types
    ├─────────────────────────────────────┤
    │   Firebase Identity  DocumentStore  │  ← provider adapters (httpx, SQLAlchemy)
    └─────────────────────────────────────┘

    Each signed-in client owns one ClientContext holding its session,
    gateways, controller and navigator; nothing reads the session from
    process-wide state.
"""

__version__ = "1.0.0"
