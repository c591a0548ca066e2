# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - schema.py: Discovery settings, Schema/Property and published Record
#
# These models define the "contract" between the engine and the RPC layer.
# =============================================================================

from .schema import (
    CandidateFile,
    DiscoverySettings,
    Property,
    PropertyType,
    Record,
    Schema,
)

# -----------------------------------------------------------------------------
# __all__ - Explicit public API
# -----------------------------------------------------------------------------
__all__ = [
    "CandidateFile",
    "DiscoverySettings",
    "Property",
    "PropertyType",
    "Record",
    "Schema",
]
