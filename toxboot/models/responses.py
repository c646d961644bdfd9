"""API response models.

All API responses are wrapped in the envelope
{ success: bool, data: T | None, error: str | None, meta: dict | None }.
Nodes are rendered through ``NodeView`` so key bytes travel as hex.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from toxboot.models.node import ToxNode

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None


class NodeView(BaseModel):
    """Serializable view of a ToxNode."""

    ipv4: str
    ipv6: str
    port: int
    public_key: str
    maintainer: str
    location: str
    status: bool

    @classmethod
    def from_node(cls, node: ToxNode) -> "NodeView":
        return cls(
            ipv4=node.ipv4,
            ipv6=node.ipv6,
            port=node.port,
            public_key=node.public_key_hex,
            maintainer=node.maintainer,
            location=node.location,
            status=node.status,
        )
