"""Concurrent probe scheduler with selection policies.

Fans out one probe task per node, collects results from a shared queue in
arrival order, and applies a ``SelectionPolicy``:

- ``ALL``: wait for every probe; return each alive node once.
- ``ANY_ONE``: as ``ALL``, then pick one alive node uniformly at random.
- ``FIRST_ONE``: return on the first result of any kind. If that result is
  "not alive" the answer is ``None``, even if a later probe would have
  succeeded. Latency wins over completeness here.

Probes that are still running when ``FIRST_ONE`` returns are not cancelled.
They finish on their own (closing their sockets) and their results land in
a queue nobody reads. The queue is unbounded, so a late producer never
blocks. The scheduler keeps a reference to every running task until it is
done so the event loop cannot drop it mid-flight.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Sequence

from toxboot.middleware.error_handler import NoCandidatesError
from toxboot.models.node import ProbeResult, SelectionPolicy, ToxNode
from toxboot.probe.liveness import probe_node

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[ToxNode, float], Awaitable[bool]]

# Seeded once at import; schedulers share it unless given their own.
_default_rng = random.Random()


class ProbeScheduler:
    """Runs liveness probes concurrently and selects among the results.

    Parameters
    ----------
    probe:
        Coroutine function ``(node, timeout) -> bool``. Defaults to the TCP
        probe.
    rng:
        Random source for ``ANY_ONE`` selection.
    grace_seconds:
        Extra time a single probe may take beyond the caller's timeout before
        it is treated as unreachable.
    """

    def __init__(
        self,
        probe: ProbeFunc = probe_node,
        rng: random.Random | None = None,
        grace_seconds: float = 0.5,
    ) -> None:
        self._probe = probe
        self._rng = rng if rng is not None else _default_rng
        self._grace_seconds = grace_seconds
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def inflight(self) -> int:
        """Number of probe tasks that have not finished yet."""
        return len(self._inflight)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def schedule(
        self,
        nodes: Sequence[ToxNode],
        timeout: float,
        policy: SelectionPolicy,
    ) -> list[ToxNode] | ToxNode | None:
        """Probe *nodes* and return the selection made by *policy*."""
        if policy == SelectionPolicy.ALL:
            return await self.probe_all(nodes, timeout)
        if policy == SelectionPolicy.ANY_ONE:
            return await self.probe_any(nodes, timeout)
        if policy == SelectionPolicy.FIRST_ONE:
            return await self.probe_first(nodes, timeout)
        raise ValueError(f"Unknown selection policy: {policy!r}")

    async def drain(self, timeout: float) -> None:
        """Wait up to *timeout* seconds for abandoned probes to finish.

        Probes still running afterwards are cancelled.
        """
        if not self._inflight:
            return
        logger.info("Waiting for %d in-flight probes (timeout=%.1fs)", len(self._inflight), timeout)
        _, pending = await asyncio.wait(set(self._inflight), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def probe_all(self, nodes: Sequence[ToxNode], timeout: float) -> list[ToxNode]:
        """Return every node whose probe succeeded, in arrival order."""
        if not nodes:
            return []

        start = time.monotonic()
        results = self._launch(nodes, timeout)
        alive: list[ToxNode] = []
        for _ in range(len(nodes)):
            result = await results.get()
            if result.alive:
                alive.append(result.node)

        logger.info(
            "Of %d nodes %d are alive",
            len(nodes),
            len(alive),
            extra={
                "policy": SelectionPolicy.ALL.value,
                "timeout": timeout,
                "candidates": len(nodes),
                "alive": len(alive),
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            },
        )
        return alive

    async def probe_any(self, nodes: Sequence[ToxNode], timeout: float) -> ToxNode | None:
        """Return one alive node chosen at random, or ``None``."""
        alive = await self.probe_all(nodes, timeout)
        if not alive:
            return None
        return self._rng.choice(alive)

    async def probe_first(self, nodes: Sequence[ToxNode], timeout: float) -> ToxNode | None:
        """Return the node behind the first probe result if it is alive.

        Raises
        ------
        NoCandidatesError
            If *nodes* is empty.
        """
        if not nodes:
            raise NoCandidatesError("No nodes to probe")

        start = time.monotonic()
        results = self._launch(nodes, timeout)
        first = await results.get()

        logger.info(
            "First probe result: %s is %s",
            first.node.address,
            "alive" if first.alive else "unreachable",
            extra={
                "policy": SelectionPolicy.FIRST_ONE.value,
                "timeout": timeout,
                "candidates": len(nodes),
                "node": first.node.address,
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            },
        )
        return first.node if first.alive else None

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _launch(
        self, nodes: Sequence[ToxNode], timeout: float
    ) -> asyncio.Queue[ProbeResult]:
        results: asyncio.Queue[ProbeResult] = asyncio.Queue()
        for node in nodes:
            # node is bound through the call arguments, not the loop variable
            task = asyncio.create_task(
                self._run_probe(ProbeResult(node=node), timeout, results),
                name=f"probe-{node.address}",
            )
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
        return results

    async def _run_probe(
        self,
        result: ProbeResult,
        timeout: float,
        results: asyncio.Queue[ProbeResult],
    ) -> None:
        try:
            result.alive = await asyncio.wait_for(
                self._probe(result.node, timeout),
                timeout=timeout + self._grace_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Probe exceeded its time budget",
                extra={"node": result.node.address, "timeout": timeout},
            )
            result.alive = False
        except Exception:
            logger.exception(
                "Probe failed, treating node as unreachable",
                extra={"node": result.node.address},
            )
            result.alive = False
        finally:
            # Cancelled by drain: still report, so a waiting consumer is released.
            if result.alive is None:
                result.alive = False
            results.put_nowait(result)
