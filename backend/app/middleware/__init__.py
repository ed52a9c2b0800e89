"""
TaskBoard Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to requests.

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    request_id.py: assigns X-Request-ID and exposes it through a ContextVar
    logging.py:    access log line per request (status, duration, client)
    auth.py:       bearer-token dependency for protected routes (not a
                   Starlette middleware; attached per router)
"""
