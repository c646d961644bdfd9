"""Node discovery endpoints.

- GET /api/v1/nodes — every node the registry lists
- GET /api/v1/nodes/up — nodes the registry marks as up
- GET /api/v1/nodes/random — one random advertised-up node (not probed)
- GET /api/v1/nodes/reachable — all nodes that answer a probe
- GET /api/v1/nodes/reachable/any — one random node among those that answer
- GET /api/v1/nodes/reachable/first — the first node to answer, if positive

``timeout`` is given in seconds. Outcomes with no node are successful
responses with ``data: null`` and the reason in ``meta``.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from toxboot.models.node import SelectionPolicy, ToxNode
from toxboot.models.responses import ApiResponse, NodeView


def _node_list(nodes: list[ToxNode], **meta: Any) -> dict:
    return ApiResponse(
        success=True,
        data=[NodeView.from_node(node).model_dump() for node in nodes],
        meta={"count": len(nodes), **meta},
    ).model_dump()


def _single_node(node: ToxNode | None, reason: str, **meta: Any) -> dict:
    if node is None:
        return ApiResponse(success=True, data=None, meta={"reason": reason, **meta}).model_dump()
    return ApiResponse(success=True, data=NodeView.from_node(node).model_dump(), meta=meta or None).model_dump()


def create_nodes_router(
    *,
    discovery: Any,
    default_timeout: float = 2.0,
    max_timeout: float = 30.0,
) -> APIRouter:
    """Factory that creates the nodes router with injected dependencies.

    Parameters
    ----------
    discovery:
        NodeDiscoveryService instance.
    default_timeout:
        Probe timeout used when the request does not give one.
    max_timeout:
        Upper bound accepted for the ``timeout`` query parameter.
    """
    nodes_router = APIRouter(prefix="/api/v1/nodes", tags=["nodes"])

    def timeout_param() -> Any:
        return Query(default=default_timeout, ge=0, le=max_timeout)

    @nodes_router.get("")
    async def list_nodes() -> dict:
        return _node_list(await discovery.fetch_all_candidates())

    @nodes_router.get("/up")
    async def list_up_nodes() -> dict:
        return _node_list(await discovery.fetch_up_candidates())

    @nodes_router.get("/random")
    async def random_node() -> dict:
        node = await discovery.fetch_any_candidate()
        return _single_node(node, "no advertised-up nodes")

    @nodes_router.get("/reachable")
    async def reachable_nodes(timeout: float = timeout_param()) -> dict:
        """Probe every advertised-up node; blocks for up to ``timeout``."""
        nodes = await discovery.fetch_reachable(timeout)
        return _node_list(nodes, policy=SelectionPolicy.ALL.value, timeout=timeout)

    @nodes_router.get("/reachable/any")
    async def any_reachable_node(timeout: float = timeout_param()) -> dict:
        node = await discovery.fetch_any_reachable(timeout)
        return _single_node(
            node,
            "no reachable node",
            policy=SelectionPolicy.ANY_ONE.value,
            timeout=timeout,
        )

    @nodes_router.get("/reachable/first")
    async def first_reachable_node(timeout: float = timeout_param()) -> dict:
        """Return as soon as the first probe answers."""
        node = await discovery.fetch_first_reachable(timeout)
        return _single_node(
            node,
            "first probe result was not alive",
            policy=SelectionPolicy.FIRST_ONE.value,
            timeout=timeout,
        )

    return nodes_router
