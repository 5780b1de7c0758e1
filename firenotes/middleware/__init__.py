# Middleware package init
"""
Firenotes — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Rate Limit] → [CORS] → Route Handler

    1. Request ID first: every later log line and error body carries it
    2. Logging: method, path, status and duration, rejected requests included
    3. Rate Limit: only the credential endpoints (/auth/*) are limited;
       rejected attempts never reach the identity provider
    4. CORS: Applied by FastAPI's CORSMiddleware (handles preflight)
"""
