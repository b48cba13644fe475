"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Internal data structures (documents the scorers read)
- Schemas: API contract (what client sends/receives)
"""
