"""
capopt_platform.auth

Authentication and authorization.

Responsibilities:
- JWT issuing/validation and password hashing.
- FastAPI dependencies resolving the calling user (cookie or bearer token).
"""

# Package marker.
