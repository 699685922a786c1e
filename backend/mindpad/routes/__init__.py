# Routes package init
"""
MindPad Backend — HTTP Routes Package
======================================

Route Inventory:
    - notes.py:      GET/POST /api/notes, GET/PATCH/DELETE /api/notes/{id},
                     GET /api/notes/{id}/history
    - assistant.py:  POST /functions/ai-assistant   (AI proxy)
    - realtime.py:   GET  /realtime/notes           (SSE change feed)
    - auth.py:       GET  /auth/user
    - pages.py:      GET  /, /auth, /app
    - health.py:     GET  /health

Routes stay thin: resolve the caller, call a service, shape the response.
"""
