# Middleware package init
"""
MindPad Backend — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: one access line per request, level by status class
    3. CORS: permissive headers on every response; any OPTIONS request is
       answered here with an empty 200 and never reaches a route

    Responses pass back through the chain in reverse order, so the access
    log sees the final status and the X-Request-ID header is always set.
"""
