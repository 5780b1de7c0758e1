"""
Firenotes — Application Configuration
======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before the app starts.

Backends:
    Two provider boundaries are configured here:
    - Identity: Firebase Authentication (Identity Toolkit REST API)
    - Documents: Cloud Firestore REST API, or a SQL table of JSON documents
      (STORE_BACKEND=sql) for local development without a Firebase project
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST set
    FIREBASE_API_KEY and FIREBASE_PROJECT_ID.
    """

    # ── Firebase ──────────────────────────────────────────────────────────
    # What: Web API key of the Firebase project (used by the Identity Toolkit)
    # How to obtain: Firebase console → Project settings → General
    firebase_api_key: str = Field(
        default="",
        description="Firebase Web API key for Identity Toolkit requests",
    )
    firebase_project_id: str = Field(
        default="",
        description="Firebase project id that owns the Firestore database",
    )
    identity_base_url: str = Field(default="https://identitytoolkit.googleapis.com/v1")
    firestore_base_url: str = Field(default="https://firestore.googleapis.com/v1")
    firestore_database: str = Field(default="(default)")

    # Transport timeout for every provider call; no per-operation timeouts exist
    request_timeout_seconds: float = Field(default=15.0, gt=0, le=120)

    # ── Document Store ────────────────────────────────────────────────────
    # firestore: remote managed store (production)
    # sql:       JSON documents in a SQL table (local development, tests)
    store_backend: str = Field(default="firestore")

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Ensures the backend is one we can build."""
        valid = {"firestore", "sql"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid store_backend '{v}'. Must be one of: {valid}")
        return lower

    # Format: sqlite+aiosqlite:///./firenotes.db or postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(default="sqlite+aiosqlite:///./firenotes.db")
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    notes_collection: str = Field(default="notes")
    products_collection: str = Field(default="products")
    users_collection: str = Field(default="users")

    # ── Authentication ────────────────────────────────────────────────────
    # Checked client-side on sign-up before the provider is contacted
    min_password_length: int = Field(default=6, ge=1, le=128)

    # Sliding window limit on /auth/* per client IP
    auth_rate_limit_requests: int = Field(default=30, ge=1, le=10000)
    auth_rate_limit_window: int = Field(default=300, ge=10, le=86400)  # seconds

    # Client contexts unused this long are evicted (expired ID tokens always are)
    client_idle_timeout_seconds: int = Field(default=3600, ge=60, le=86400)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the provider credentials are configured.
        When:  Called during app startup (lifespan).
        Why:   Fail fast with clear error messages instead of opaque 400s
               from Google on the first sign-in attempt.
        """
        errors = []
        if not self.firebase_api_key:
            errors.append(
                "FIREBASE_API_KEY is not set. "
                "Find it under Firebase console → Project settings → General."
            )
        if self.store_backend == "firestore" and not self.firebase_project_id:
            errors.append(
                "FIREBASE_PROJECT_ID is not set but STORE_BACKEND is 'firestore'."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
