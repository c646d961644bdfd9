"""Public models for the bootstrap node service."""

from toxboot.models.node import ProbeResult, SelectionPolicy, ToxNode
from toxboot.models.responses import ApiResponse, NodeView

__all__ = [
    "ApiResponse",
    "NodeView",
    "ProbeResult",
    "SelectionPolicy",
    "ToxNode",
]
