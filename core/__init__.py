# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for rows, requests and outcomes
# - services/: submission handlers, completion poller, schedule processor
#
# Code in this package should NOT import from app.routers or workers, and should
# never read settings from the environment: everything it needs is passed in.
# =============================================================================
