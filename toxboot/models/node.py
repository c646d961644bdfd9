"""Node data models: the candidate record and per-probe results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

MAX_PORT = 65535


@dataclass(frozen=True)
class ToxNode:
    """A single bootstrap node candidate as advertised by the registry.

    ``status`` is what the registry claims, not a verified liveness result.
    """

    ipv4: str
    port: int
    ipv6: str = ""
    public_key: bytes = b""
    maintainer: str = ""
    location: str = ""
    status: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.port <= MAX_PORT:
            raise ValueError(f"port {self.port} outside 0-{MAX_PORT}")

    @property
    def is_probeable(self) -> bool:
        return bool(self.ipv4)

    @property
    def address(self) -> str:
        return f"{self.ipv4}:{self.port}"

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex().upper()

    def __str__(self) -> str:
        return f"ToxNode {self.maintainer} at {self.address}."


class SelectionPolicy(str, Enum):
    """Which probe outcome(s) a scheduling call returns, and when it ends."""

    ALL = "all"
    ANY_ONE = "any_one"
    FIRST_ONE = "first_one"


@dataclass
class ProbeResult:
    """Outcome of probing one node; ``alive`` is None until the probe finishes."""

    node: ToxNode
    alive: bool | None = field(default=None)
