"""Node discovery service — the public operations of the package.

Each call fetches and parses the registry afresh (nothing is cached), keeps
the nodes the registry advertises as up, and hands the probeable ones to the
probe scheduler under the requested selection policy.

``FetchError`` and ``ParseError`` propagate unchanged and abort the call with
no partial result. An empty candidate list is not an error: it yields ``[]``
or ``None`` depending on the operation.
"""

from __future__ import annotations

import logging
import random

from toxboot.middleware.error_handler import NoCandidatesError
from toxboot.models.node import SelectionPolicy, ToxNode
from toxboot.probe.scheduler import ProbeScheduler
from toxboot.registry.client import RegistryClient
from toxboot.registry.parser import RegistryParser

logger = logging.getLogger(__name__)


class NodeDiscoveryService:
    """Fetches registry candidates and selects live nodes among them.

    Dependencies are injected via the constructor so the service is testable
    without network access.
    """

    def __init__(
        self,
        *,
        registry_client: RegistryClient,
        parser: RegistryParser,
        scheduler: ProbeScheduler,
        rng: random.Random | None = None,
    ) -> None:
        self._registry_client = registry_client
        self._parser = parser
        self._scheduler = scheduler
        self._rng = rng if rng is not None else random.Random()

    @property
    def scheduler(self) -> ProbeScheduler:
        return self._scheduler

    @property
    def registry_url(self) -> str:
        return self._registry_client.url

    # ------------------------------------------------------------------
    # Registry views (no probing)
    # ------------------------------------------------------------------

    async def fetch_all_candidates(self) -> list[ToxNode]:
        """Return every node listed by the registry, in table order."""
        content = await self._registry_client.fetch()
        nodes = self._parser.parse(content)
        logger.info(
            "Registry lists %d nodes",
            len(nodes),
            extra={"candidates": len(nodes), "registry_url": self._registry_client.url},
        )
        return nodes

    async def fetch_up_candidates(self) -> list[ToxNode]:
        """Return the nodes the registry marks as up."""
        nodes = await self.fetch_all_candidates()
        return [node for node in nodes if node.status]

    async def fetch_any_candidate(self) -> ToxNode | None:
        """Return one random advertised-up node without probing it."""
        nodes = await self.fetch_up_candidates()
        if not nodes:
            return None
        return self._rng.choice(nodes)

    # ------------------------------------------------------------------
    # Probed selections
    # ------------------------------------------------------------------

    async def fetch_reachable(self, timeout: float) -> list[ToxNode]:
        """Return every advertised-up node that answers within *timeout*.

        Blocks for up to *timeout* seconds (plus aggregation overhead).
        """
        nodes = await self._probe_candidates()
        return await self._scheduler.schedule(nodes, timeout, SelectionPolicy.ALL)

    async def fetch_any_reachable(self, timeout: float) -> ToxNode | None:
        """Return a random node among those reachable within *timeout*."""
        nodes = await self._probe_candidates()
        return await self._scheduler.schedule(nodes, timeout, SelectionPolicy.ANY_ONE)

    async def fetch_first_reachable(self, timeout: float) -> ToxNode | None:
        """Return the first node to answer, if the first answer is positive.

        Usually the fastest way to get a usable node.
        """
        nodes = await self._probe_candidates()
        try:
            return await self._scheduler.schedule(nodes, timeout, SelectionPolicy.FIRST_ONE)
        except NoCandidatesError:
            logger.info("No advertised-up nodes to probe", extra={"candidates": 0})
            return None

    async def _probe_candidates(self) -> list[ToxNode]:
        nodes = await self.fetch_up_candidates()
        probeable = [node for node in nodes if node.is_probeable]
        if len(probeable) < len(nodes):
            logger.debug("Skipping %d nodes without IPv4", len(nodes) - len(probeable))
        return probeable
