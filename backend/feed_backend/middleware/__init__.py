# Middleware package init
"""
Feed Backend — Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS headers] → [Request ID] → [Logging] → [Error envelope] → Route

    1. CORS first: preflights are answered before any work, and every
       response (errors included) leaves with the Access-Control headers
    2. Request ID: correlation ID for the logs below
    3. Logging: method, path, status, duration
    4. Error envelope: uncaught exceptions become 500 JSON responses
"""
