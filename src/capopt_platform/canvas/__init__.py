"""
capopt_platform.canvas

Business Model Canvas rules.

Responsibilities:
- Section registry (slugs, schemas, minimum counts).
- Status transition permissions and completeness checks.
- Content quality checks.
"""

# Package marker; import from submodules.
