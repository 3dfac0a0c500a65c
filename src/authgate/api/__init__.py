"""
authgate.api

API package for the authgate service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and exception mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + session resolution + delegation to services.
