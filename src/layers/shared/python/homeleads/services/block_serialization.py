"""Conversion between stored block lists and the visual editor's node graph.

The editor works on a flat mapping of node id -> node, rooted at a
synthetic ``ROOT`` canvas. Each node looks like::

    {
        "type": {"resolvedName": "HeroHeadlineBlock"},
        "isCanvas": False,
        "props": {"id": ..., "kind": ..., "props": {...}, "hidden": False},
        "parent": "ROOT",
        "displayName": "HeroHeadlineBlock",
        "custom": {},
        "nodes": [],
    }

Pages store the editor-agnostic form: ordered ``BlockConfig`` lists,
``SectionConfig`` lists and hero elements grouped by column.
"""

import secrets
import string
from typing import Any, Iterable

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.blocks import (
    HERO_ELEMENT_KINDS,
    BlockConfig,
    BlockKind,
    HeroColumn,
    HeroElementConfig,
    HeroElementsByColumn,
    SectionConfig,
    SectionKind,
)
from homeleads.utils.exceptions import ValidationError

logger = structlog.get_logger()

ROOT_ID = "ROOT"

KIND_TO_RESOLVED_NAME: dict[str, str] = {
    BlockKind.HEADER.value: "HeaderBlock",
    BlockKind.HERO_LAYOUT.value: "HeroLayoutBlock",
    BlockKind.HERO_HEADLINE.value: "HeroHeadlineBlock",
    BlockKind.HERO_SUBHEADLINE.value: "HeroSubheadlineBlock",
    BlockKind.HERO_LEFT_RICH_TEXT.value: "HeroLeftRichTextBlock",
    BlockKind.HERO_FORM.value: "HeroFormBlock",
    BlockKind.HERO_TRUST_ROW.value: "HeroTrustRowBlock",
    BlockKind.HERO_BADGE_STRIP.value: "HeroBadgeStripBlock",
}

RESOLVED_NAME_TO_KIND: dict[str, str] = {name: kind for kind, name in KIND_TO_RESOLVED_NAME.items()}

HERO_KIND_BY_RESOLVED_NAME: dict[str, str] = {
    KIND_TO_RESOLVED_NAME[kind.value]: kind.value for kind in HERO_ELEMENT_KINDS
}

# Only the hero section is editable in the section editor
SECTION_KIND_TO_RESOLVED_NAME: dict[str, str] = {SectionKind.HERO.value: "HeroBlock"}
SECTION_RESOLVED_NAME_TO_KIND: dict[str, str] = {"HeroBlock": SectionKind.HERO.value}

_ID_ALPHABET = string.ascii_lowercase + string.digits

DEFAULT_BLOCKS: tuple[tuple[str, str], ...] = (
    ("block-header", BlockKind.HEADER.value),
    ("block-hero-headline", BlockKind.HERO_HEADLINE.value),
    ("block-hero-subheadline", BlockKind.HERO_SUBHEADLINE.value),
    ("block-hero-left", BlockKind.HERO_LEFT_RICH_TEXT.value),
    ("block-hero-form", BlockKind.HERO_FORM.value),
)


def _random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_block_id() -> str:
    """New editor node id, e.g. ``block-k3j9x0a2b``."""
    return f"block-{_random_suffix()}"


def generate_section_id() -> str:
    return f"section-{_random_suffix()}"


def _node(resolved_name: str, props: dict[str, Any], parent: str | None, *, canvas: bool = False) -> dict[str, Any]:
    node: dict[str, Any] = {
        "type": {"resolvedName": resolved_name},
        "props": props,
        "parent": parent,
        "displayName": resolved_name,
        "custom": {},
        "nodes": [],
    }
    if canvas:
        node["isCanvas"] = True
    return node


def _root(child_ids: list[str]) -> dict[str, Any]:
    return {
        "type": "div",
        "isCanvas": True,
        "props": {},
        "parent": None,
        "displayName": "div",
        "custom": {},
        "nodes": child_ids,
    }


def resolved_name_of(node: dict[str, Any] | None) -> str | None:
    """The component name of a node, or None for plain DOM nodes."""
    if not isinstance(node, dict):
        return None
    node_type = node.get("type")
    if isinstance(node_type, dict):
        name = node_type.get("resolvedName")
        return name if isinstance(name, str) else None
    return None


def _root_children(graph: dict[str, Any]) -> list[str]:
    root = graph.get(ROOT_ID)
    if not isinstance(root, dict) or not isinstance(root.get("nodes"), list):
        return []
    return root["nodes"]


def _unknown_node(node_id: str, resolved_name: str | None, strict: bool) -> None:
    if strict:
        raise ValidationError([{
            "field": f"nodes.{node_id}",
            "message": f"Unknown block type '{resolved_name}'",
        }])
    logger.warning("Dropping unknown editor node", node_id=node_id, resolved_name=resolved_name)


def _claim_id(candidate: str, seen: set[str]) -> tuple[str, str]:
    """Node id and stored id for an entry. A repeated id gets a fresh one."""
    if candidate in seen:
        node_id = generate_block_id()
        seen.add(node_id)
        return node_id, node_id
    seen.add(candidate)
    return (candidate if candidate.startswith("block-") else generate_block_id()), candidate


def blocks_to_graph(blocks: Iterable[BlockConfig]) -> dict[str, Any]:
    """Build an editor graph with one ROOT child per block, in order.

    Repeated block ids are replaced so each block keeps its own node.
    """
    graph: dict[str, Any] = {}
    child_ids: list[str] = []
    seen: set[str] = set()

    for block in blocks:
        node_id, block_id = _claim_id(block.id, seen)
        child_ids.append(node_id)
        resolved_name = KIND_TO_RESOLVED_NAME[block.kind]
        graph[node_id] = _node(
            resolved_name,
            {
                "id": block_id,
                "kind": block.kind,
                "props": dict(block.props),
                "hidden": block.hidden is True,
            },
            ROOT_ID,
        )

    graph[ROOT_ID] = _root(child_ids)
    return graph


def graph_to_blocks(graph: dict[str, Any], strict: bool = False) -> list[BlockConfig]:
    """Read the ordered block list back from an editor graph.

    Args:
        graph: Serialized editor nodes.
        strict: Raise instead of dropping nodes with unknown type names.

    Returns:
        Blocks in ROOT child order.

    Raises:
        ValidationError: On an unknown node type when strict.
    """
    blocks: list[BlockConfig] = []

    for node_id in _root_children(graph):
        node = graph.get(node_id)
        if not isinstance(node, dict):
            continue

        resolved_name = resolved_name_of(node)
        kind = RESOLVED_NAME_TO_KIND.get(resolved_name or "")
        if not kind:
            _unknown_node(node_id, resolved_name, strict)
            continue

        props = node.get("props") or {}
        block_id = props.get("id")
        blocks.append(BlockConfig(
            id=block_id if isinstance(block_id, str) and block_id else generate_block_id(),
            kind=kind,
            props=props.get("props") or {},
            hidden=props.get("hidden") is True,
        ))

    return blocks


def _column_elements(graph: dict[str, Any], canvas_id: str | None, column: HeroColumn) -> list[HeroElementConfig]:
    canvas = graph.get(canvas_id) if canvas_id else None
    if not isinstance(canvas, dict) or not isinstance(canvas.get("nodes"), list):
        return []

    elements: list[HeroElementConfig] = []
    for node_id in canvas["nodes"]:
        node = graph.get(node_id)
        if not isinstance(node, dict):
            continue
        kind = HERO_KIND_BY_RESOLVED_NAME.get(resolved_name_of(node) or "")
        if not kind:
            continue
        props = node.get("props") or {}
        element_id = props.get("id")
        elements.append(HeroElementConfig(
            id=element_id if isinstance(element_id, str) and element_id else node_id,
            kind=kind,
            column=column,
            props=props.get("props") or {},
            hidden=props.get("hidden") is True,
        ))
    return elements


def extract_hero_elements(graph: dict[str, Any]) -> HeroElementsByColumn | None:
    """Extract hero elements from the first hero layout node under ROOT.

    The layout node's first child canvas is the left column and its second
    the right column. Returns None when the graph has no hero layout.
    """
    hero_layout_id = next(
        (
            node_id
            for node_id in _root_children(graph)
            if resolved_name_of(graph.get(node_id)) == "HeroLayoutBlock"
        ),
        None,
    )
    if hero_layout_id is None:
        return None

    canvases = graph[hero_layout_id].get("nodes") or []
    left_id = canvases[0] if len(canvases) > 0 else None
    right_id = canvases[1] if len(canvases) > 1 else None

    return HeroElementsByColumn(
        left=_column_elements(graph, left_id, HeroColumn.LEFT),
        right=_column_elements(graph, right_id, HeroColumn.RIGHT),
    )


def hero_elements_to_graph(
    hero_elements: HeroElementsByColumn,
    blocks: Iterable[BlockConfig] = (),
) -> dict[str, Any]:
    """Build an editor graph holding a hero layout with two column canvases.

    Any non-hero blocks (e.g. the header) are placed under ROOT before the
    hero layout node.
    """
    graph = blocks_to_graph(b for b in blocks if b.kind != BlockKind.HERO_LAYOUT.value)
    seen = set(graph) | {node["props"].get("id") for node in graph.values() if node["props"]}
    layout_id = generate_block_id()
    layout = _node(
        KIND_TO_RESOLVED_NAME[BlockKind.HERO_LAYOUT.value],
        {"id": layout_id, "kind": BlockKind.HERO_LAYOUT.value, "props": {}, "hidden": False},
        ROOT_ID,
    )

    for column in (HeroColumn.LEFT, HeroColumn.RIGHT):
        canvas_id = f"{layout_id}-{column.value}"
        canvas = _node("HeroColumnCanvas", {"column": column.value}, layout_id, canvas=True)
        for element in hero_elements.column(column):
            node_id, element_id = _claim_id(element.id, seen)
            graph[node_id] = _node(
                KIND_TO_RESOLVED_NAME[element.kind],
                {"id": element_id, "kind": element.kind, "props": dict(element.props), "hidden": element.hidden},
                canvas_id,
            )
            canvas["nodes"].append(node_id)
        graph[canvas_id] = canvas
        layout["nodes"].append(canvas_id)

    graph[layout_id] = layout
    graph[ROOT_ID]["nodes"].append(layout_id)
    return graph


def sections_to_graph(sections: Iterable[SectionConfig]) -> dict[str, Any]:
    """Section-level editor graph: one ROOT child per section."""
    graph: dict[str, Any] = {}
    child_ids: list[str] = []

    for section in sections:
        node_id = section.id if section.id.startswith("section-") else generate_section_id()
        child_ids.append(node_id)
        resolved_name = SECTION_KIND_TO_RESOLVED_NAME.get(section.kind, "HeroBlock")
        graph[node_id] = _node(
            resolved_name,
            {"id": section.id, "kind": section.kind, "props": dict(section.props)},
            ROOT_ID,
        )

    graph[ROOT_ID] = _root(child_ids)
    return graph


def graph_to_sections(graph: dict[str, Any]) -> list[SectionConfig]:
    """Read sections back; unrecognised component names become hero sections."""
    sections: list[SectionConfig] = []
    for node_id in _root_children(graph):
        node = graph.get(node_id)
        if not isinstance(node, dict):
            continue
        kind = SECTION_RESOLVED_NAME_TO_KIND.get(resolved_name_of(node) or "", SectionKind.HERO.value)
        props = node.get("props") or {}
        section_id = props.get("id")
        sections.append(SectionConfig(
            id=section_id if isinstance(section_id, str) and section_id else generate_section_id(),
            kind=kind,
            props=props.get("props") or {},
        ))
    return sections


def default_blocks_for_page(page: Any = None) -> list[BlockConfig]:
    """Blocks used when a page has never been edited in the block editor."""
    return [BlockConfig(id=block_id, kind=kind) for block_id, kind in DEFAULT_BLOCKS]


def effective_blocks(blocks: list[BlockConfig] | None) -> list[BlockConfig]:
    return blocks if blocks else default_blocks_for_page()


def has_visible_block(blocks: Iterable[BlockConfig], kind: BlockKind | str) -> bool:
    kind_value = BlockKind(kind).value
    return any(b.kind == kind_value and b.hidden is not True for b in blocks)


def hero_section(sections: Iterable[SectionConfig]) -> SectionConfig | None:
    return next((s for s in sections if s.kind == SectionKind.HERO.value), None)


def hero_elements_from_sections(sections: Iterable[SectionConfig]) -> HeroElementsByColumn | None:
    """Hero elements stored on the hero section's ``heroElements`` prop.

    Elements of unknown kinds are skipped so newer editor data still
    renders on older code.
    """
    section = hero_section(sections)
    if not section:
        return None
    raw = section.props.get("heroElements")
    if not isinstance(raw, dict):
        return None

    columns: dict[str, list[HeroElementConfig]] = {}
    for column in HeroColumn:
        parsed = []
        for entry in raw.get(column.value) or []:
            if not isinstance(entry, dict):
                continue
            try:
                parsed.append(HeroElementConfig.model_validate({**entry, "column": column.value}))
            except PydanticValidationError:
                logger.debug("Skipping hero element", section_id=section.id, kind=entry.get("kind"))
        columns[column.value] = parsed
    return HeroElementsByColumn(**columns)


def with_hero_elements(
    sections: Iterable[SectionConfig],
    hero_elements: HeroElementsByColumn,
) -> list[SectionConfig]:
    """Copy of ``sections`` with the hero elements stored on the hero section.

    A hero section is prepended when the page has none.
    """
    stored = {
        column.value: [
            el.model_dump(exclude={"column"}) for el in hero_elements.column(column)
        ]
        for column in HeroColumn
    }
    result = [s.model_copy(deep=True) for s in sections]
    hero = hero_section(result)
    if hero is None:
        hero = SectionConfig(id=generate_section_id(), kind=SectionKind.HERO)
        result.insert(0, hero)
    hero.props = {**hero.props, "heroElements": stored}
    return result


def project_hero_column(
    hero_elements: HeroElementsByColumn | None,
    column: HeroColumn | str,
) -> list[HeroElementConfig]:
    """Visible elements of one column in display order."""
    if hero_elements is None:
        return []
    return [el for el in hero_elements.column(column) if el.hidden is not True]
