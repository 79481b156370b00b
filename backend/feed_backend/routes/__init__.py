# Routes package init
"""
Feed Backend — API Routes Package
===================================

Route Inventory:
    - feed.py:    GET  /feed/posts   (list all posts)
                  POST /feed/post    (create a post, optional image)
    - auth.py:    PUT  /auth/signup, POST /auth/login (placeholders, 501)
    - health.py:  GET  /health       (service health check)

Routes stay thin: they read the request, call a service, and return a
schema. Errors are raised and rendered by the app's error translator.
"""
