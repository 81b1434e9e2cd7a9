# Routes package init
"""
Blog API Backend — API Routes Package
======================================

What:  HTTP route handlers that accept requests and return envelopes.
How:   Each route module handles one resource.

Route Inventory:
    - posts.py:       GET|POST /posts, GET /posts/search,
                      GET|PUT|POST|DELETE /posts/{id}
    - comments.py:    GET|POST /posts/{id}/comments,
                      PUT|DELETE /posts/{id}/comments/{comment_id}
    - users.py:       GET|POST /users, GET|PUT|DELETE /users/{id},
                      GET /users/{id}/posts
    - statistics.py:  GET /statistics
    - health.py:      GET /health
    - forms.py:       JSON-or-form body parsing shared by the write endpoints

Design Principle:
    Routes should be THIN — they handle HTTP concerns only:
    - Extract data from request (query params, path, body)
    - Call the appropriate service
    - Wrap the result in the envelope

    Errors are raised, not rendered; main.py's exception handlers own the
    error envelope.
"""
