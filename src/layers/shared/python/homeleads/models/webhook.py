"""Webhook target configuration.

WebhookConfig Key Pattern:
    PK: WEBHOOK#{id}
    SK: META
    GSI2PK: ENTITY#WEBHOOK
    GSI2SK: {name}#{id}
"""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel as PydanticBaseModel, Field, HttpUrl, field_validator

from homeleads.models.base import BaseModel


class HttpMethod(str, Enum):
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"


class WebhookConfig(BaseModel):
    """An outbound target notified of every new lead."""

    _pk_prefix: ClassVar[str] = "WEBHOOK#"

    name: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    method: HttpMethod = HttpMethod.POST
    is_active: bool = True
    headers: dict[str, str] = Field(default_factory=dict, description="Static request headers")

    def get_index_keys(self) -> dict[str, str]:
        return {"GSI2PK": "ENTITY#WEBHOOK", "GSI2SK": f"{self.name}#{self.id}"}


class CreateWebhookRequest(PydanticBaseModel):
    """Request model for creating a webhook."""

    name: str = Field(..., min_length=1, max_length=200)
    url: HttpUrl
    method: HttpMethod = HttpMethod.POST
    is_active: bool = True
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, v):
        return v.upper() if isinstance(v, str) else v


class UpdateWebhookRequest(PydanticBaseModel):
    """Partial webhook update."""

    name: str | None = Field(None, min_length=1, max_length=200)
    url: HttpUrl | None = None
    method: HttpMethod | None = None
    is_active: bool | None = None
    headers: dict[str, str] | None = None

    @field_validator("method", mode="before")
    @classmethod
    def upper_method(cls, v):
        return v.upper() if isinstance(v, str) else v
