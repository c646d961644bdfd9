"""Service layer — node discovery operations."""

from toxboot.services.discovery import NodeDiscoveryService

__all__ = ["NodeDiscoveryService"]
