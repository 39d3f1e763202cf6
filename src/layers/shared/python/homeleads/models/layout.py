"""Saved grid layout for a landing page hero.

PageLayout Key Pattern:
    PK: PAGE#{page_id}
    SK: LAYOUT
"""

from typing import ClassVar

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field

from homeleads.models.base import BaseModel


class LayoutItem(PydanticBaseModel):
    """One region of the 12-column hero grid (react-grid-layout shape)."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    i: str = Field(..., min_length=1, description="Region id")
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    w: int = Field(..., ge=1, le=12)
    h: int = Field(..., ge=1)
    hidden: bool | None = None
    static: bool | None = None
    min_w: int | None = Field(None, alias="minW")
    min_h: int | None = Field(None, alias="minH")


class PageLayout(BaseModel):
    """Layout data saved by the drag-and-drop editor for one page."""

    _pk_prefix: ClassVar[str] = "PAGE#"

    page_id: str = Field(..., description="Owning landing page")
    layout_data: list[LayoutItem] = Field(default_factory=list)

    def get_pk(self) -> str:
        return f"PAGE#{self.page_id}"

    def get_sk(self) -> str:
        return "LAYOUT"
