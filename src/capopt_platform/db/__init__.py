"""
capopt_platform.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, reference data and repositories.
"""

# Package marker.
