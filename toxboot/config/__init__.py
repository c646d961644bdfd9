"""Configuration module — settings and registry layouts."""

from toxboot.config.registry_layouts import (
    RegistryLayout,
    TableFormat,
    builtin_layouts,
    load_registry_layouts,
)
from toxboot.config.settings import ToxBootSettings

__all__ = [
    "RegistryLayout",
    "TableFormat",
    "ToxBootSettings",
    "builtin_layouts",
    "load_registry_layouts",
]
