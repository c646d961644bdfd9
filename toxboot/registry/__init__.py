"""Registry ingestion — page fetch and node table parsing."""

from toxboot.registry.client import RegistryClient
from toxboot.registry.parser import RegistryParser, build_nodes

__all__ = ["RegistryClient", "RegistryParser", "build_nodes"]
