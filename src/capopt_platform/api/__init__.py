"""
capopt_platform.api

API package for the CapOpt Platform service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error translation and response views.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin: request validation + auth + delegation to repositories/services.
