"""Node table parser.

Turns the registry page into an ordered list of ``ToxNode`` records in a
single pass: locate the node table between the layout's markers, split it
into cells, check that the cell count divides evenly into rows, and map each
row onto node fields by column name.

Two tokenizers exist, one per table format:

- ``html_table``: rendered page, one ``<td>`` element per cell.
- ``wiki_markup``: raw wiki source, ``| a | b | c |`` rows. Header rows
  (starting with ``^``) are skipped. ``[[target|label]]`` links count as one
  cell and render as their label.
"""

from __future__ import annotations

import html
import logging
import re

from toxboot.config.registry_layouts import RegistryLayout, TableFormat
from toxboot.middleware.error_handler import ParseError
from toxboot.models.node import MAX_PORT, ToxNode

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_HEX_KEY_RE = re.compile(r"(?:[0-9A-Fa-f]{2})*")
# Cell separators in wiki rows; a pipe inside a [[target|label]] link is not one.
_WIKI_SEPARATOR_RE = re.compile(r"\|(?![^\[]*\]\])")
_WIKI_LINK_RE = re.compile(r"\[\[([^|\]]*)(?:\|([^\]]*))?\]\]")

# Placeholders the wiki uses for "no IPv6 address".
_EMPTY_IPV6 = {"-", "none", "NONE"}


def _clean(value: str) -> str:
    return html.unescape(_TAG_RE.sub("", value)).strip()


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ParseError(f"Port '{value}' is not numeric", value=value) from None
    if not 0 <= port <= MAX_PORT:
        raise ParseError(f"Port {port} outside 0-{MAX_PORT}", value=value)
    return port


def _parse_key(value: str) -> bytes:
    if not _HEX_KEY_RE.fullmatch(value):
        raise ParseError("Public key is not an even-length hex string", value=value)
    return bytes.fromhex(value)


def build_nodes(fields: list[str], columns: list[str]) -> list[ToxNode]:
    """Group a flat list of cell values into rows and build one node per row.

    Raises
    ------
    ParseError
        If ``len(fields)`` is not a multiple of ``len(columns)``, or a port
        or key value cannot be decoded.
    """
    width = len(columns)
    if len(fields) % width != 0:
        raise ParseError(
            f"Table has {len(fields)} cells, not a multiple of {width} columns",
            cells=len(fields),
            columns=width,
        )

    has_status = "status" in columns
    nodes: list[ToxNode] = []
    for start in range(0, len(fields), width):
        row = dict(zip(columns, fields[start:start + width]))
        ipv6 = row.get("ipv6", "")
        nodes.append(
            ToxNode(
                ipv4=row["ipv4"],
                ipv6="" if ipv6 in _EMPTY_IPV6 else ipv6,
                port=_parse_port(row["port"]),
                public_key=_parse_key(row.get("public_key", "")),
                maintainer=row.get("maintainer", ""),
                location=row.get("location", ""),
                # Layouts without a status column advertise every listed node.
                status="UP" in row["status"] if has_status else True,
            )
        )
    return nodes


class RegistryParser:
    """Parses registry content according to one ``RegistryLayout``."""

    def __init__(self, layout: RegistryLayout) -> None:
        self._layout = layout

    @property
    def layout(self) -> RegistryLayout:
        return self._layout

    def parse(self, content: str) -> list[ToxNode]:
        """Parse *content* into nodes, preserving table order.

        Raises
        ------
        ParseError
            If the content is empty, the table markers are missing, the table
            has no cells, or any row fails to decode.
        """
        if not content or not content.strip():
            raise ParseError("Registry returned empty content")

        section = self._table_section(content)
        if self._layout.format == TableFormat.WIKI_MARKUP:
            fields = self._wiki_cells(section)
        else:
            fields = self._html_cells(section)

        if not fields:
            raise ParseError("Node table has no cells")

        nodes = build_nodes(fields, list(self._layout.columns))
        logger.debug("Parsed %d nodes from %d cells", len(nodes), len(fields))
        return nodes

    def _table_section(self, content: str) -> str:
        _, sep, rest = content.partition(self._layout.table_start)
        if not sep:
            raise ParseError(
                "Node table start marker not found",
                marker=self._layout.table_start,
            )
        return rest.partition(self._layout.table_end)[0]

    @staticmethod
    def _html_cells(section: str) -> list[str]:
        cells: list[str] = []
        for chunk in section.split("<td")[1:]:
            # Drop the rest of the opening tag, then everything after </td>.
            _, sep, body = chunk.partition(">")
            if not sep:
                raise ParseError("Unterminated <td> tag in node table")
            cells.append(_clean(body.split("</td", 1)[0]))
        return cells

    @staticmethod
    def _wiki_cells(section: str) -> list[str]:
        cells: list[str] = []
        for line in html.unescape(section).splitlines():
            line = line.strip()
            if not line.startswith("|"):
                continue
            row = line[1:]
            if row.endswith("|"):
                row = row[:-1]
            cells.extend(
                _WIKI_LINK_RE.sub(lambda m: m.group(2) or m.group(1), cell).strip()
                for cell in _WIKI_SEPARATOR_RE.split(row)
            )
        return cells
