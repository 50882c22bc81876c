"""
capopt_platform.services

Service layer (transaction owners for multi-row operations).
"""

# Package marker.
