"""Tests for block list <-> editor graph conversion."""

import pytest

from homeleads.models.blocks import BlockConfig, HeroElementsByColumn, SectionConfig
from homeleads.services.block_serialization import (
    ROOT_ID,
    blocks_to_graph,
    default_blocks_for_page,
    effective_blocks,
    extract_hero_elements,
    graph_to_blocks,
    graph_to_sections,
    has_visible_block,
    hero_elements_from_sections,
    hero_elements_to_graph,
    project_hero_column,
    sections_to_graph,
    with_hero_elements,
)
from homeleads.utils.exceptions import ValidationError


def _blocks():
    return [
        BlockConfig(id="block-header", kind="header"),
        BlockConfig(id="block-hero-headline", kind="heroHeadline", props={"text": "Hi"}),
        BlockConfig(id="legacy-form", kind="heroForm", hidden=True),
    ]


def _hero_elements():
    return HeroElementsByColumn(
        left=[
            {"id": "block-headline", "kind": "heroHeadline", "column": "left", "props": {"text": "Bend"}},
            {"id": "block-rich", "kind": "heroLeftRichText", "column": "left", "hidden": True},
        ],
        right=[{"id": "block-form", "kind": "heroForm", "column": "right"}],
    )


class TestBlocksGraph:
    """Tests for blocks_to_graph and graph_to_blocks."""

    def test_graph_root_lists_blocks_in_order(self):
        graph = blocks_to_graph(_blocks())

        children = graph[ROOT_ID]["nodes"]
        assert len(children) == 3
        assert children[:2] == ["block-header", "block-hero-headline"]
        assert graph["block-hero-headline"]["type"] == {"resolvedName": "HeroHeadlineBlock"}
        assert graph["block-hero-headline"]["parent"] == ROOT_ID

    def test_non_block_ids_get_generated_node_ids(self):
        graph = blocks_to_graph(_blocks())

        node_id = graph[ROOT_ID]["nodes"][2]
        assert node_id.startswith("block-")
        assert graph[node_id]["props"]["id"] == "legacy-form"
        assert graph[node_id]["props"]["hidden"] is True

    def test_round_trip_preserves_blocks(self):
        blocks = _blocks()
        assert graph_to_blocks(blocks_to_graph(blocks)) == blocks

    def test_repeated_block_ids_keep_both_blocks(self):
        blocks = [
            BlockConfig(id="block-a", kind="heroHeadline", props={"text": "Hi"}),
            BlockConfig(id="block-a", kind="heroForm"),
        ]

        graph = blocks_to_graph(blocks)
        restored = graph_to_blocks(graph)

        assert len(graph[ROOT_ID]["nodes"]) == 2
        assert [b.kind for b in restored] == ["heroHeadline", "heroForm"]
        assert restored[0].id == "block-a"
        assert restored[1].id != "block-a"
        assert restored[0].props == {"text": "Hi"}

    def test_hero_element_sharing_block_id_kept(self):
        elements = HeroElementsByColumn(right=[{"id": "block-header", "kind": "heroForm", "column": "right"}])

        graph = hero_elements_to_graph(elements, [BlockConfig(id="block-header", kind="header")])

        assert graph["block-header"]["type"] == {"resolvedName": "HeaderBlock"}
        assert [e.kind for e in extract_hero_elements(graph).right] == ["heroForm"]

    def test_empty_graph(self):
        assert graph_to_blocks({}) == []
        assert graph_to_blocks(blocks_to_graph([])) == []

    def test_unknown_node_dropped(self):
        graph = blocks_to_graph(_blocks())
        graph["block-x"] = {"type": {"resolvedName": "VideoBlock"}, "props": {}}
        graph[ROOT_ID]["nodes"].insert(0, "block-x")

        blocks = graph_to_blocks(graph)

        assert [b.id for b in blocks] == ["block-header", "block-hero-headline", "legacy-form"]

    def test_unknown_node_rejected_when_strict(self):
        graph = blocks_to_graph([])
        graph["block-x"] = {"type": {"resolvedName": "VideoBlock"}, "props": {}}
        graph[ROOT_ID]["nodes"].append("block-x")

        with pytest.raises(ValidationError) as exc_info:
            graph_to_blocks(graph, strict=True)
        assert "VideoBlock" in exc_info.value.message

    def test_missing_block_id_generated(self):
        graph = {
            ROOT_ID: {"nodes": ["n1"]},
            "n1": {"type": {"resolvedName": "HeaderBlock"}, "props": {}},
        }

        blocks = graph_to_blocks(graph)

        assert blocks[0].kind == "header"
        assert blocks[0].id.startswith("block-")
        assert blocks[0].hidden is False


class TestHeroElements:
    """Tests for hero column extraction and storage."""

    def test_hero_graph_round_trip(self):
        graph = hero_elements_to_graph(_hero_elements(), [BlockConfig(id="block-header", kind="header")])

        assert graph[ROOT_ID]["nodes"][0] == "block-header"
        extracted = extract_hero_elements(graph)

        assert [e.id for e in extracted.left] == ["block-headline", "block-rich"]
        assert [e.id for e in extracted.right] == ["block-form"]
        assert extracted.left[1].hidden is True
        assert extracted.left[0].props == {"text": "Bend"}

    def test_extract_without_hero_layout(self):
        assert extract_hero_elements(blocks_to_graph(_blocks())) is None

    def test_extract_with_missing_right_canvas(self):
        graph = {
            ROOT_ID: {"nodes": ["layout"]},
            "layout": {"type": {"resolvedName": "HeroLayoutBlock"}, "nodes": ["left"]},
            "left": {"nodes": ["el"]},
            "el": {"type": {"resolvedName": "HeroFormBlock"}, "props": {}},
        }

        extracted = extract_hero_elements(graph)

        assert [e.kind for e in extracted.left] == ["heroForm"]
        assert extracted.left[0].id == "el"
        assert extracted.right == []

    def test_project_hero_column_skips_hidden(self):
        visible = project_hero_column(_hero_elements(), "left")
        assert [e.id for e in visible] == ["block-headline"]
        assert project_hero_column(None, "left") == []

    def test_with_hero_elements_prepends_hero_section(self):
        sections = [SectionConfig(id="section-faq", kind="description")]

        result = with_hero_elements(sections, _hero_elements())

        assert result[0].kind == "hero"
        assert result[1].id == "section-faq"
        stored = result[0].props["heroElements"]
        assert [e["id"] for e in stored["left"]] == ["block-headline", "block-rich"]
        assert "column" not in stored["right"][0]
        assert sections[0].props == {}

    def test_stored_hero_elements_read_back(self):
        sections = with_hero_elements(
            [SectionConfig(id="section-hero", kind="hero", props={"title": "x"})],
            _hero_elements(),
        )

        elements = hero_elements_from_sections(sections)

        assert sections[0].props["title"] == "x"
        assert [e.id for e in elements.all_elements()] == ["block-headline", "block-rich", "block-form"]

    def test_unknown_stored_elements_skipped(self):
        sections = [SectionConfig(id="s", kind="hero", props={"heroElements": {
            "left": [{"id": "a", "kind": "heroVideo"}, {"id": "b", "kind": "heroHeadline"}],
        }})]

        elements = hero_elements_from_sections(sections)

        assert [e.id for e in elements.left] == ["b"]
        assert elements.right == []

    def test_no_hero_section(self):
        assert hero_elements_from_sections([SectionConfig(id="s", kind="footer")]) is None


class TestSections:
    """Tests for the section-level graph."""

    def test_sections_round_trip(self):
        sections = [SectionConfig(id="section-hero", kind="hero", props={"image": "a.jpg"})]
        assert graph_to_sections(sections_to_graph(sections)) == sections

    def test_unknown_component_becomes_hero(self):
        graph = {
            ROOT_ID: {"nodes": ["n"]},
            "n": {"type": {"resolvedName": "Mystery"}, "props": {"id": "s-1", "props": {"a": 1}}},
        }

        sections = graph_to_sections(graph)

        assert sections[0].kind == "hero"
        assert sections[0].id == "s-1"


class TestDefaults:
    """Tests for default block handling."""

    def test_effective_blocks_falls_back_to_defaults(self):
        assert effective_blocks(None) == default_blocks_for_page()
        assert effective_blocks([]) == default_blocks_for_page()
        blocks = _blocks()
        assert effective_blocks(blocks) is blocks

    def test_has_visible_block(self):
        blocks = _blocks()
        assert has_visible_block(blocks, "heroHeadline") is True
        assert has_visible_block(blocks, "heroForm") is False
