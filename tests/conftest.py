"""Shared test fixtures and hypothesis strategies for the toxboot test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import pytest
from hypothesis import strategies as st

from toxboot.config.registry_layouts import builtin_layouts
from toxboot.config.settings import ToxBootSettings
from toxboot.models.node import ToxNode

KEY_HEX = "951C88B7E75C867418ACDB5D273821372BB5BD652740BCDF623A4FA293E75D2F"

HTML_PREAMBLE = """<html><body>
<h2 id="intro">Nodes</h2>
<h3 id="active_nodes_list">Active Nodes List</h3>
<div class="table"><table class="inline">
<tr class="row0"><th class="col0">IPv4</th><th class="col1">IPv6</th><th class="col2">Port</th>
<th class="col3">Public Key</th><th class="col4">Maintainer</th><th class="col5">Location</th>
<th class="col6">Status</th></tr>
"""

HTML_EPILOGUE = """</table></div>
<h2 id="running_a_node">Running a node</h2>
<p>See <a href="/users/nodes">docs</a>.</p>
</body></html>
"""


def html_row(*cells: str) -> str:
    tds = "".join(f'<td class="col{i}"> {cell} </td>' for i, cell in enumerate(cells))
    return f'<tr class="row1">{tds}</tr>\n'


def html_page(rows: Iterable[Iterable[str]]) -> str:
    return HTML_PREAMBLE + "".join(html_row(*row) for row in rows) + HTML_EPILOGUE


def make_node(index: int = 1, *, status: bool = True, ipv4: str | None = None, port: int = 33445) -> ToxNode:
    return ToxNode(
        ipv4=ipv4 if ipv4 is not None else f"192.0.2.{index}",
        port=port,
        public_key=bytes.fromhex(KEY_HEX),
        maintainer=f"maintainer{index}",
        location="DE",
        status=status,
    )


def run_async(coro):
    """Run an async coroutine synchronously."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class FakeRegistryClient:
    """Stands in for RegistryClient; returns canned content."""

    def __init__(self, content: str = "", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.url = "https://registry.test/nodes"
        self.calls = 0

    async def fetch(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.content


def scripted_probe(outcomes: dict[str, tuple[float, bool]]):
    """Build a probe that answers per node address after a fixed delay.

    Nodes missing from *outcomes* are unreachable after sleeping out the
    timeout, like a host that drops packets.
    """

    async def probe(node: ToxNode, timeout: float) -> bool:
        delay, alive = outcomes.get(node.address, (timeout, False))
        await asyncio.sleep(min(delay, timeout))
        return alive if delay <= timeout else False

    return probe


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> ToxBootSettings:
    """Test settings with short timeouts and a fixed seed."""
    return ToxBootSettings(
        probe_timeout_seconds=0.2,
        max_probe_timeout_seconds=2.0,
        probe_grace_seconds=0.2,
        random_seed=1234,
    )


BLACKHOLE_IPV4 = "192.0.2.250"


@pytest.fixture
def blackhole(monkeypatch: pytest.MonkeyPatch) -> str:
    """An IPv4 address whose TCP connects never complete.

    Connects to any other host go through the real ``asyncio.open_connection``.
    """
    real_open_connection = asyncio.open_connection

    async def open_connection(host, port, **kwargs):
        if host == BLACKHOLE_IPV4:
            await asyncio.sleep(3600)
        return await real_open_connection(host, port, **kwargs)

    monkeypatch.setattr(asyncio, "open_connection", open_connection)
    return BLACKHOLE_IPV4


@pytest.fixture
def html_layout():
    return builtin_layouts()["html_status"]


@pytest.fixture
def wiki_layout():
    return builtin_layouts()["wiki_markup"]


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

octets = st.integers(min_value=0, max_value=255)
ipv4_addresses = st.tuples(octets, octets, octets, octets).map(
    lambda parts: ".".join(str(p) for p in parts)
)
ports = st.integers(min_value=0, max_value=65535)
public_keys = st.binary(min_size=0, max_size=32)
labels = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789_-", min_size=1, max_size=12)

nodes = st.builds(
    ToxNode,
    ipv4=ipv4_addresses,
    port=ports,
    public_key=public_keys,
    maintainer=labels,
    location=st.sampled_from(["DE", "US", "NL", "RU", "FR"]),
    status=st.booleans(),
)

# Alive mask for scheduler tests (True = probe succeeds)
alive_masks = st.lists(st.booleans(), min_size=1, max_size=12)
