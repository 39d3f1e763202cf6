"""Four-region hero grid layout.

Regions live on a 12-column grid. Header and footer bars are pinned full
width; the text and form containers can be moved and resized in the
editor. Saved entries override the defaults region by region.
"""

from dataclasses import dataclass
from typing import Iterable

from homeleads.models.layout import LayoutItem

HEADER_BAR = "header-bar"
FOOTER_BAR = "footer-bar"
TEXT_CONTAINER = "text-container"
FORM_CONTAINER = "form-container"

REGION_IDS = (HEADER_BAR, FOOTER_BAR, TEXT_CONTAINER, FORM_CONTAINER)

GRID_COLUMNS = 12

_DEFAULTS: dict[str, dict] = {
    HEADER_BAR: {"i": HEADER_BAR, "x": 0, "y": 0, "w": 12, "h": 1, "static": True},
    FOOTER_BAR: {"i": FOOTER_BAR, "x": 0, "y": 7, "w": 12, "h": 1, "static": True},
    TEXT_CONTAINER: {"i": TEXT_CONTAINER, "x": 0, "y": 1, "w": 8, "h": 5, "minW": 4, "minH": 3, "static": False},
    FORM_CONTAINER: {"i": FORM_CONTAINER, "x": 8, "y": 1, "w": 4, "h": 5, "minW": 4, "minH": 3, "static": False},
}

# Static responsive split used when no usable saved layout exists
STATIC_TEXT_CLASS = "col-span-12 md:col-span-8"
STATIC_FORM_CLASS = "col-span-12 md:col-span-4"


def default_layout() -> list[LayoutItem]:
    """Default geometry for every region."""
    return [LayoutItem.model_validate({**_DEFAULTS[i], "hidden": False}) for i in REGION_IDS]


def _as_dict(item: LayoutItem | dict) -> dict:
    if isinstance(item, LayoutItem):
        return item.model_dump(by_alias=True, exclude_none=True)
    return {k: v for k, v in item.items() if v is not None}


def merge_layout(
    saved: Iterable[LayoutItem | dict] | None,
    overrides: Iterable[LayoutItem | dict] | None = None,
) -> list[LayoutItem]:
    """Merge saved entries over defaults, region by region.

    Each region is its default, overlaid by an explicit override, overlaid
    by the saved entry. Regions missing from ``saved`` fall back on their
    own; ``hidden`` defaults to False. Unknown region ids are ignored.
    """
    saved_by_id = {d["i"]: d for d in map(_as_dict, saved or []) if d.get("i") in _DEFAULTS}
    overrides_by_id = {d["i"]: d for d in map(_as_dict, overrides or []) if d.get("i") in _DEFAULTS}

    merged = []
    for region_id in REGION_IDS:
        entry = saved_by_id.get(region_id, {})
        data = {**_DEFAULTS[region_id], **overrides_by_id.get(region_id, {}), **entry}
        data["hidden"] = entry.get("hidden", overrides_by_id.get(region_id, {}).get("hidden", False)) is True
        merged.append(LayoutItem.model_validate(data))
    return merged


def normalize_layout(items: Iterable[LayoutItem | dict]) -> list[LayoutItem]:
    """Prepare editor output for saving.

    Header and footer keep their fixed geometry regardless of what the
    editor sent; only their ``hidden`` flag is taken.
    """
    normalized = []
    for item in merge_layout(items):
        if item.i in (HEADER_BAR, FOOTER_BAR):
            item = LayoutItem.model_validate({**_DEFAULTS[item.i], "hidden": item.hidden})
        normalized.append(item)
    return normalized


def find_visible(layout: Iterable[LayoutItem] | None, region_id: str) -> LayoutItem | None:
    """The saved entry for a region if present and not hidden."""
    for item in layout or []:
        if item.i == region_id and item.hidden is not True:
            return item
    return None


@dataclass(frozen=True)
class GridPlacement:
    """How the renderer places the hero regions for one page."""

    use_saved_layout: bool
    text_style: str | None
    form_style: str | None
    text_class: str
    form_class: str
    show_header: bool
    show_footer: bool

    @property
    def main_padding_class(self) -> str | None:
        """Offset applied to <main> for the fixed overlay bars."""
        if self.show_header and self.show_footer:
            return ""
        if self.show_header:
            return "pt-[100px]"
        if self.show_footer:
            return "pb-[100px]"
        return None


def grid_column(item: LayoutItem) -> str:
    return f"{item.x + 1} / span {item.w}"


def grid_row(item: LayoutItem) -> str:
    return f"{item.y + 1} / span {item.h}"


def css_placement(item: LayoutItem) -> str:
    """Inline style for explicit placement, e.g. ``grid-column: 1 / span 8; ...``."""
    return f"grid-column: {grid_column(item)}; grid-row: {grid_row(item)};"


def grid_placement(layout: list[LayoutItem] | None) -> GridPlacement:
    """Decide placement from a page's saved layout (None when never saved).

    The explicit placement is only used when both the text and form
    containers are saved and visible; otherwise the static 8/4 split
    applies. Header and footer overlays show when saved and not hidden.
    """
    text = find_visible(layout, TEXT_CONTAINER)
    form = find_visible(layout, FORM_CONTAINER)
    use_saved = text is not None and form is not None

    return GridPlacement(
        use_saved_layout=use_saved,
        text_style=css_placement(text) if use_saved else None,
        form_style=css_placement(form) if use_saved else None,
        text_class="md:-mt-4 lg:-mt-[50px] content-area" if use_saved else STATIC_TEXT_CLASS,
        form_class="form-area" if use_saved else STATIC_FORM_CLASS,
        show_header=find_visible(layout, HEADER_BAR) is not None,
        show_footer=find_visible(layout, FOOTER_BAR) is not None,
    )
