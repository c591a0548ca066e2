# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .discovery_service import DiscoveryService
from .publish_service import PublishService

__all__ = [
    "DiscoveryService",
    "PublishService",
]
