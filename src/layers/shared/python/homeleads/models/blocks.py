"""Block and section value objects stored on landing pages.

Block Key Pattern: none. Blocks live inside the page item as ordered
lists; ``id`` values are stable identifiers across edits.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field, model_validator


class BlockKind(str, Enum):
    """Closed set of page block kinds."""

    HEADER = "header"
    HERO_LAYOUT = "heroLayout"
    HERO_HEADLINE = "heroHeadline"
    HERO_SUBHEADLINE = "heroSubheadline"
    HERO_LEFT_RICH_TEXT = "heroLeftRichText"
    HERO_FORM = "heroForm"
    HERO_TRUST_ROW = "heroTrustRow"
    HERO_BADGE_STRIP = "heroBadgeStrip"


HERO_ELEMENT_KINDS = frozenset({
    BlockKind.HERO_HEADLINE,
    BlockKind.HERO_SUBHEADLINE,
    BlockKind.HERO_LEFT_RICH_TEXT,
    BlockKind.HERO_FORM,
    BlockKind.HERO_TRUST_ROW,
    BlockKind.HERO_BADGE_STRIP,
})


class HeroColumn(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class SectionKind(str, Enum):
    """Page-level section kinds."""

    HERO = "hero"
    DESCRIPTION = "description"
    CAROUSEL = "carousel"
    IMAGE_SLIDER = "imageSlider"
    TESTIMONIAL = "testimonial"
    TRUST_BAR = "trustBar"
    FOOTER = "footer"


class BlockConfig(PydanticBaseModel):
    """A single composable block in a page's block list."""

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(..., min_length=1)
    kind: BlockKind
    props: dict[str, Any] = Field(default_factory=dict)
    hidden: bool = False


class HeroElementConfig(BlockConfig):
    """A block placed in one column of the hero layout."""

    column: HeroColumn

    @model_validator(mode="after")
    def _check_hero_kind(self) -> "HeroElementConfig":
        if self.kind not in {k.value for k in HERO_ELEMENT_KINDS}:
            raise ValueError(f"{self.kind} cannot be placed in a hero column")
        return self


class HeroElementsByColumn(PydanticBaseModel):
    """Hero elements grouped by column, each list in display order."""

    left: list[HeroElementConfig] = Field(default_factory=list)
    right: list[HeroElementConfig] = Field(default_factory=list)

    def column(self, column: HeroColumn | str) -> list[HeroElementConfig]:
        return self.left if HeroColumn(column) == HeroColumn.LEFT else self.right

    def all_elements(self) -> list[HeroElementConfig]:
        return [*self.left, *self.right]


class SectionConfig(PydanticBaseModel):
    """A page section with an arbitrary per-kind props payload."""

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(..., min_length=1)
    kind: SectionKind
    props: dict[str, Any] = Field(default_factory=dict)

