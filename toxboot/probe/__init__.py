"""Liveness probing — single TCP probe and the concurrent scheduler."""

from toxboot.probe.liveness import probe_node
from toxboot.probe.scheduler import ProbeFunc, ProbeScheduler

__all__ = ["ProbeFunc", "ProbeScheduler", "probe_node"]
