"""Tenant domain model.

Each domain is one branded hostname serving its own set of landing pages.

Domain Key Pattern:
    PK: DOMAIN#{id}
    SK: META
    GSI1PK: HOSTNAME#{hostname}
    GSI1SK: DOMAIN#{id}
    GSI2PK: ENTITY#DOMAIN
    GSI2SK: {hostname}

Hostname reservation (uniqueness):
    PK: HOSTNAME#{hostname}
    SK: RESERVATION
"""

import re
from typing import ClassVar

from pydantic import BaseModel as PydanticBaseModel, EmailStr, Field, field_validator

from homeleads.models.base import BaseModel

HOSTNAME_PATTERN = re.compile(
    r"^(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))*$"
)


def normalize_hostname(hostname: str) -> str:
    """Lowercase a hostname and strip any port and trailing dot."""
    return hostname.strip().lower().split(":", 1)[0].rstrip(".")


def _validate_hostname(v: str) -> str:
    v = normalize_hostname(v)
    if not HOSTNAME_PATTERN.match(v):
        raise ValueError("Invalid hostname")
    return v


class Domain(BaseModel):
    """A tenant hostname with branding and lead notification settings."""

    _pk_prefix: ClassVar[str] = "DOMAIN#"

    hostname: str = Field(..., description="Unique lowercase hostname, e.g. bendhomes.us")
    display_name: str = Field(..., min_length=1, max_length=200)
    logo_url: str | None = None
    right_logo_url: str | None = Field(None, description="Secondary (partner) logo shown on the right")
    primary_color: str = Field(default="#1f2937")
    accent_color: str = Field(default="#f59e0b")
    ga4_id: str | None = Field(None, description="Google Analytics 4 measurement id")
    meta_pixel_id: str | None = None
    notify_email: str | None = Field(None, description="Recipient of new-lead emails")
    notify_sms: str | None = Field(None, description="E.164 number for new-lead texts")
    is_active: bool = Field(default=True, description="Inactive domains serve nothing")

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        return _validate_hostname(v)

    def get_index_keys(self) -> dict[str, str]:
        return {
            "GSI1PK": f"HOSTNAME#{self.hostname}",
            "GSI1SK": f"DOMAIN#{self.id}",
            "GSI2PK": "ENTITY#DOMAIN",
            "GSI2SK": self.hostname,
        }


class CreateDomainRequest(PydanticBaseModel):
    """Request model for creating a domain."""

    hostname: str = Field(..., min_length=1, max_length=253)
    display_name: str = Field(..., min_length=1, max_length=200)
    notify_email: EmailStr
    notify_sms: str | None = None
    logo_url: str | None = None
    right_logo_url: str | None = None
    primary_color: str | None = None
    accent_color: str | None = None
    ga4_id: str | None = None
    meta_pixel_id: str | None = None
    is_active: bool = True

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        return _validate_hostname(v)


class UpdateDomainRequest(PydanticBaseModel):
    """Request model for updating a domain. Only supplied fields change."""

    hostname: str | None = Field(None, min_length=1, max_length=253)
    display_name: str | None = Field(None, min_length=1, max_length=200)
    notify_email: EmailStr | None = None
    notify_sms: str | None = None
    logo_url: str | None = None
    right_logo_url: str | None = None
    primary_color: str | None = None
    accent_color: str | None = None
    ga4_id: str | None = None
    meta_pixel_id: str | None = None
    is_active: bool | None = None

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str | None) -> str | None:
        return _validate_hostname(v) if v is not None else v
