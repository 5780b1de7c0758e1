# Routes package init
"""
Firenotes — API Routes Package
===============================

What:  HTTP route handlers, one module per screen.
Why:   Routes are the entry point for all calls from the UI.

Route Inventory:
    - auth.py:    POST /auth/login | /auth/signup | /auth/forgot-password | /auth/logout
    - home.py:    GET  /home, POST /home/reload
                  POST/PUT/DELETE /home/notes[/{id}], /home/products[/{id}]
    - health.py:  GET  /health

Design Principle:
    Routes stay thin: they check form fields, pick the navigation outcome
    and shape the response. Provider calls and view state live in services.
"""
