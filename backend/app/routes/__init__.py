"""
TaskBoard Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login
    - tasks.py:   /api/tasks CRUD + POST /api/tasks/{id}/upload
    - health.py:  GET /ping, GET /health

Routes stay thin: extract input, call a service, shape the response.
"""
