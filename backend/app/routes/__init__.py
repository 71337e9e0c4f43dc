# Routes package init
"""
Userbase Backend — API Routes Package
=======================================

Route Inventory:
    - users.py:   GET    /api/users              (list, optional ?email= filter)
                  GET    /api/users/{id}         (single user)
                  POST   /api/users              (create)
                  PUT    /api/users/{id}         (create or replace)
                  DELETE /api/users/{id}         (delete)
    - health.py:  GET    /health                 (service health check)

Design Principle:
    Routes are THIN: extract data from the request, call UserService,
    pick the status code. Everything else lives below them.
"""
