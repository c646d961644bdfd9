"""Registry layout models and YAML loader.

The upstream node list has changed shape over time. Each layout describes
one version of the table: where to fetch it, how to tokenize it, and which
column holds which node field. Exactly one layout is active per service
instance.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ColumnName = Literal[
    "ipv4", "ipv6", "port", "public_key", "maintainer", "location", "status"
]


class TableFormat(str, Enum):
    """How the table body is split into cells."""

    HTML_TABLE = "html_table"
    WIKI_MARKUP = "wiki_markup"


class RegistryLayout(BaseModel):
    """One historical layout of the registry node table."""

    url: str = Field(..., min_length=1)
    format: TableFormat = TableFormat.HTML_TABLE
    table_start: str = Field(..., min_length=1)
    table_end: str = Field(..., min_length=1)
    columns: list[ColumnName] = Field(..., min_length=2)

    @field_validator("columns")
    @classmethod
    def _check_columns(cls, columns: list[str]) -> list[str]:
        if len(set(columns)) != len(columns):
            raise ValueError("columns must not repeat")
        for required in ("ipv4", "port"):
            if required not in columns:
                raise ValueError(f"columns must include '{required}'")
        return columns

    @property
    def has_status(self) -> bool:
        return "status" in self.columns


_BUILTIN_LAYOUTS: dict[str, RegistryLayout] = {
    "html_status": RegistryLayout(
        url="https://wiki.tox.chat/users/nodes",
        format=TableFormat.HTML_TABLE,
        table_start='id="active_nodes_list"',
        table_end='id="running_a_node"',
        columns=["ipv4", "ipv6", "port", "public_key", "maintainer", "location", "status"],
    ),
    "wiki_markup": RegistryLayout(
        url="https://wiki.tox.chat/users/nodes?do=edit",
        format=TableFormat.WIKI_MARKUP,
        table_start="Active Nodes List",
        table_end="Running a node",
        columns=["ipv4", "ipv6", "port", "public_key", "maintainer", "location"],
    ),
}


def builtin_layouts() -> dict[str, RegistryLayout]:
    """Return a copy of the layouts compiled into the package."""
    return dict(_BUILTIN_LAYOUTS)


def load_registry_layouts(yaml_path: str) -> dict[str, RegistryLayout]:
    """Parse a registry layouts YAML file into typed RegistryLayout objects.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        A dict mapping layout names to RegistryLayout instances. If the file
        is missing or unreadable, the built-in layouts are returned.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Registry layouts file not found at %s — using built-in layouts", yaml_path)
        return builtin_layouts()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse registry layouts YAML at %s: %s", yaml_path, exc)
        return builtin_layouts()

    if not isinstance(raw, dict) or not isinstance(raw.get("layouts"), dict):
        logger.warning("Registry layouts YAML missing 'layouts' key — using built-in layouts")
        return builtin_layouts()

    layouts: dict[str, RegistryLayout] = {}
    for name, config in raw["layouts"].items():
        try:
            layouts[name] = RegistryLayout.model_validate(config)
        except Exception as exc:
            logger.error("Invalid registry layout '%s': %s — skipping", name, exc)

    if not layouts:
        logger.warning("No valid registry layouts in %s — using built-in layouts", yaml_path)
        return builtin_layouts()

    return layouts
