# Services package init
"""
MindPad Backend — Services Layer
=================================

What:  Business logic between the HTTP routes and the database.
How:   Services are stateless singletons; routes pass in the request's
       session and the authenticated user's id.

Service Inventory:
    - NoteService:        user-scoped CRUD over notes, AI history reads
    - AssistantService:   AI proxy workflow (prompt → gateway → history)
    - GatewayService:     ChatCompletionService over the hosted AI gateway
    - AuthService:        session token validation (PyJWT)
    - ChangeFeed:         in-process realtime fan-out of note changes
    - prompts:            the fixed action → prompt table
"""
