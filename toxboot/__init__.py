"""Tox bootstrap node discovery.

Fetches the node list published on the Tox wiki and finds out which of the
advertised nodes are reachable right now. The quickest way to get one usable
node is ``NodeDiscoveryService.fetch_first_reachable``.
"""

from toxboot.models.node import SelectionPolicy, ToxNode
from toxboot.probe.liveness import probe_node
from toxboot.probe.scheduler import ProbeScheduler
from toxboot.services.discovery import NodeDiscoveryService

__all__ = [
    "NodeDiscoveryService",
    "ProbeScheduler",
    "SelectionPolicy",
    "ToxNode",
    "probe_node",
]
