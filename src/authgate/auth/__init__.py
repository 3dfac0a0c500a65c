"""
authgate.auth

Authentication primitives.

Responsibilities:
- Principal / session domain types.
- Secret hashing (argon2) and session handle signing (JWS).
- FastAPI dependencies that resolve and guard sessions.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here touches the database directly; persistence goes through
# `authgate.db.repositories` and the services layer.
