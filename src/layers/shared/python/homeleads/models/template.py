"""Master template model.

One template per landing page type. New pages are seeded from it.

MasterTemplate Key Pattern:
    PK: TEMPLATE#{type}
    SK: META
    GSI2PK: ENTITY#TEMPLATE
    GSI2SK: {type}
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import Field, model_validator

from homeleads.models.base import BaseModel
from homeleads.models.blocks import SectionConfig
from homeleads.models.form import FormSchema


class LandingPageType(str, Enum):
    """Audience a landing page is built for."""

    BUYER = "buyer"
    SELLER = "seller"


class MasterTemplate(BaseModel):
    """Default sections and form for a page type."""

    _pk_prefix: ClassVar[str] = "TEMPLATE#"

    type: LandingPageType
    name: str = Field(..., min_length=1, max_length=200)
    sections: list[SectionConfig] = Field(default_factory=list)
    form_schema: FormSchema = Field(default_factory=FormSchema)
    hero_image_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def default_id_to_type(cls, data: Any) -> Any:
        # Templates are addressed by type; the id mirrors it
        if isinstance(data, dict) and not data.get("id") and data.get("type"):
            data = {**data, "id": str(getattr(data["type"], "value", data["type"]))}
        return data

    def get_pk(self) -> str:
        return f"TEMPLATE#{self.type}"

    def get_index_keys(self) -> dict[str, str]:
        return {"GSI2PK": "ENTITY#TEMPLATE", "GSI2SK": str(self.type)}

    def is_empty(self) -> bool:
        """True when there is nothing useful to seed a page with."""
        return not self.sections or self.form_schema.is_empty()
