"""
authgate.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Any async SQLAlchemy backend works; SQLite (aiosqlite) is the default.
