"""Lead model.

Lead Key Pattern:
    PK: LEAD#{id}
    SK: META
    GSI1PK: PAGE_LEADS#{page_id}
    GSI1SK: {created_at}
    GSI2PK: ENTITY#LEAD
    GSI2SK: {created_at}#{id}
"""

import re
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel as PydanticBaseModel, Field

from homeleads.models.base import BaseModel
from homeleads.models.template import LandingPageType

STEP_KEY_PATTERN = re.compile(r"^step\d+$")

# Keys stripped from stored form data and notifications
INTERNAL_FORM_KEYS = frozenset({"recaptchaToken", "website"})


class LeadStatus(str, Enum):
    """Follow-up status; the only mutable part of a lead."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CLOSED = "closed"


class Lead(BaseModel):
    """A captured form submission tied to a domain and page."""

    _pk_prefix: ClassVar[str] = "LEAD#"

    domain_id: str
    page_id: str
    type: LandingPageType
    form_data: dict[str, Any] = Field(default_factory=dict)
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    status: LeadStatus = LeadStatus.NEW
    visitor_ip: str | None = None
    visitor_user_agent: str | None = None
    referrer: str | None = None

    def get_index_keys(self) -> dict[str, str]:
        created = self.created_at.isoformat()
        return {
            "GSI1PK": f"PAGE_LEADS#{self.page_id}",
            "GSI1SK": created,
            "GSI2PK": "ENTITY#LEAD",
            "GSI2SK": f"{created}#{self.id}",
        }

    @property
    def step_keys(self) -> list[str]:
        return [k for k in self.form_data if STEP_KEY_PATTERN.match(k)]

    @property
    def is_multistep(self) -> bool:
        return bool(self.step_keys)


class UpdateLeadRequest(PydanticBaseModel):
    """Admins may only change a lead's status."""

    status: LeadStatus
