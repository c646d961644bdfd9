"""Unit tests for the registry table parser."""

import pytest

from tests.conftest import KEY_HEX, html_page
from toxboot.middleware.error_handler import ParseError
from toxboot.registry.parser import RegistryParser, build_nodes

ROWS = [
    ["144.76.60.215", "2a01:4f8:191:64d6::1", "33445", KEY_HEX, "sonOfRa", "DE", "UP"],
    ["23.226.230.47", "-", "443", KEY_HEX, "<a href=\"/u/stal\">stal</a>", "US", "DOWN"],
    ["178.62.250.138", "", "33445", KEY_HEX, "Impyy", "NL", "<span class=\"up\">UP</span>"],
]

WIKI_PAGE = """<html><body><textarea name="wikitext">
===== Active Nodes List =====
^ IPv4 ^ IPv6 ^ Port ^ Public Key ^ Maintainer ^ Location ^
| 144.76.60.215 | 2a01:4f8:191:64d6::1 | 33445 | {key} | sonOfRa | DE |
| 23.226.230.47 | - | 443 | {key} | stal &amp; co | US |
===== Running a node =====
| 1.1.1.1 | - | 1 | {key} | ignored | XX |
</textarea></body></html>
""".format(key=KEY_HEX)


class TestHtmlLayout:
    def test_parses_rows_in_order(self, html_layout):
        nodes = RegistryParser(html_layout).parse(html_page(ROWS))
        assert [n.ipv4 for n in nodes] == ["144.76.60.215", "23.226.230.47", "178.62.250.138"]

    def test_maps_columns(self, html_layout):
        node = RegistryParser(html_layout).parse(html_page(ROWS))[0]
        assert node.ipv6 == "2a01:4f8:191:64d6::1"
        assert node.port == 33445
        assert node.public_key == bytes.fromhex(KEY_HEX)
        assert node.maintainer == "sonOfRa"
        assert node.location == "DE"
        assert node.status is True

    def test_status_down(self, html_layout):
        assert RegistryParser(html_layout).parse(html_page(ROWS))[1].status is False

    def test_strips_inner_markup(self, html_layout):
        nodes = RegistryParser(html_layout).parse(html_page(ROWS))
        assert nodes[1].maintainer == "stal"
        assert nodes[2].status is True

    def test_dash_ipv6_becomes_empty(self, html_layout):
        assert RegistryParser(html_layout).parse(html_page(ROWS))[1].ipv6 == ""

    def test_ignores_cells_after_end_marker(self, html_layout):
        page = html_page(ROWS[:1]) + '<table><tr><td>extra</td></tr></table>'
        assert len(RegistryParser(html_layout).parse(page)) == 1

    def test_empty_content_raises(self, html_layout):
        with pytest.raises(ParseError, match="empty"):
            RegistryParser(html_layout).parse("   ")

    def test_missing_start_marker_raises(self, html_layout):
        with pytest.raises(ParseError, match="start marker"):
            RegistryParser(html_layout).parse("<html><td>1</td></html>")

    def test_table_without_cells_raises(self, html_layout):
        with pytest.raises(ParseError, match="no cells"):
            RegistryParser(html_layout).parse(html_page([]))

    def test_wrong_cell_count_raises(self, html_layout):
        page = html_page([ROWS[0][:6]])
        with pytest.raises(ParseError, match="not a multiple of 7"):
            RegistryParser(html_layout).parse(page)

    def test_non_numeric_port_raises(self, html_layout):
        row = list(ROWS[0])
        row[2] = "port"
        with pytest.raises(ParseError, match="not numeric"):
            RegistryParser(html_layout).parse(html_page([row]))

    def test_port_out_of_range_raises(self, html_layout):
        row = list(ROWS[0])
        row[2] = "70000"
        with pytest.raises(ParseError, match="outside"):
            RegistryParser(html_layout).parse(html_page([row]))

    @pytest.mark.parametrize("key", ["XYZ", KEY_HEX[:-1], "95 1C", "95:1C"])
    def test_undecodable_key_raises(self, html_layout, key):
        row = list(ROWS[0])
        row[3] = key
        with pytest.raises(ParseError, match="hex"):
            RegistryParser(html_layout).parse(html_page([row]))


class TestWikiLayout:
    def test_parses_rows_between_markers(self, wiki_layout):
        nodes = RegistryParser(wiki_layout).parse(WIKI_PAGE)
        assert [n.ipv4 for n in nodes] == ["144.76.60.215", "23.226.230.47"]

    def test_every_listed_node_is_advertised_up(self, wiki_layout):
        nodes = RegistryParser(wiki_layout).parse(WIKI_PAGE)
        assert all(n.status for n in nodes)

    def test_unescapes_markup(self, wiki_layout):
        nodes = RegistryParser(wiki_layout).parse(WIKI_PAGE)
        assert nodes[1].maintainer == "stal & co"
        assert nodes[1].ipv6 == ""

    def test_link_markup_stays_in_one_cell(self, wiki_layout):
        page = WIKI_PAGE.replace("| sonOfRa |", "| [[user:sonofra|sonOfRa]] |").replace(
            "| stal &amp; co |", "| [[user:stal]] |"
        )
        nodes = RegistryParser(wiki_layout).parse(page)
        assert [n.maintainer for n in nodes] == ["sonOfRa", "user:stal"]
        assert [n.location for n in nodes] == ["DE", "US"]

    def test_html_page_does_not_parse_as_wiki(self, wiki_layout):
        with pytest.raises(ParseError):
            RegistryParser(wiki_layout).parse(html_page(ROWS))


class TestBuildNodes:
    COLUMNS = ["ipv4", "port"]

    def test_minimal_columns(self):
        nodes = build_nodes(["192.0.2.1", "1", "192.0.2.2", "2"], self.COLUMNS)
        assert [(n.ipv4, n.port) for n in nodes] == [("192.0.2.1", 1), ("192.0.2.2", 2)]
        assert all(n.public_key == b"" for n in nodes)

    def test_empty_key_is_allowed(self):
        nodes = build_nodes(["192.0.2.1", "1", ""], ["ipv4", "port", "public_key"])
        assert nodes[0].public_key == b""

    def test_indivisible_field_count_raises(self):
        with pytest.raises(ParseError) as exc_info:
            build_nodes(["192.0.2.1", "1", "192.0.2.2"], self.COLUMNS)
        assert exc_info.value.details == {"cells": 3, "columns": 2}
