# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains transport-agnostic business logic:
# - models/: Pydantic schemas for settings, schemas and records
# - services/: Discover and Publish orchestration
#
# Code in this package should NOT use the generated protobuf messages.
# The servicer converts them to models first, which keeps the logic
# testable without a running server.
# =============================================================================
