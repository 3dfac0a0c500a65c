"""
authgate.services

Service layer (transaction owners).

Responsibilities:
- Credential store, credential verifier and session gate.
- Translate persistence errors into `authgate.errors` kinds.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services are constructed per request around one AsyncSession; see `api.deps`.
