"""HTTP routers."""

from toxboot.routers.health import create_health_router
from toxboot.routers.nodes import create_nodes_router

__all__ = ["create_health_router", "create_nodes_router"]
