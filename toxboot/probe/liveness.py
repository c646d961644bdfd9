"""TCP liveness probe for a single node.

ICMP is not available without privileges, so reachability is decided by one
TCP connect to the node's port. A node counts as alive when the connect
succeeds *or* is actively refused: a refusal means a host answered at that
address. Timeouts, routing failures, malformed or unresolvable host names and
every other OS error mean unreachable.

Nodes that are up but silently drop connection attempts are therefore
reported unreachable.

Only IPv4 is probed. The IPv6 address is never tried.
"""

from __future__ import annotations

import asyncio
import logging
import socket

from toxboot.models.node import ToxNode

logger = logging.getLogger(__name__)


async def probe_node(node: ToxNode, timeout: float) -> bool:
    """Return whether *node* answers a TCP connect within *timeout* seconds.

    Exactly one attempt is made. Any connection opened is closed before
    returning.

    Raises
    ------
    ValueError
        If *timeout* is negative or the node has no IPv4 address.
    """
    if timeout < 0:
        raise ValueError(f"timeout must be non-negative, got {timeout}")
    if not node.is_probeable:
        raise ValueError(f"node {node} has no IPv4 address")

    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(node.ipv4, node.port, family=socket.AF_INET),
            timeout=timeout,
        )
    except ConnectionRefusedError:
        logger.debug("Connection refused, node alive", extra={"node": node.address})
        return True
    except (OSError, asyncio.TimeoutError, UnicodeError, ValueError) as exc:
        # Malformed host text fails in the idna codec or getaddrinfo, not as OSError.
        logger.debug(
            "Node unreachable: %s",
            type(exc).__name__,
            extra={"node": node.address},
        )
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        logger.debug("Error while closing probe connection", extra={"node": node.address})
    logger.debug("Connection accepted, node alive", extra={"node": node.address})
    return True
