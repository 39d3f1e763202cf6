"""Base model for entities stored in the single homeleads table."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Self

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_attribute(value: Any) -> Any:
    """JSON-mode value to a DynamoDB attribute. None entries are dropped."""
    if isinstance(value, dict):
        return {k: _to_attribute(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_to_attribute(v) for v in value]
    if isinstance(value, float):
        # boto3 rejects float
        return Decimal(str(value))
    return value


def _from_attribute(value: Any) -> Any:
    """DynamoDB attribute back to plain Python; numbers become int where whole."""
    if isinstance(value, dict):
        return {k: _from_attribute(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_attribute(v) for v in value]
    if isinstance(value, Decimal):
        return int(value) if value % 1 == 0 else float(value)
    return value


class BaseModel(PydanticBaseModel):
    """Stored entity: ULID id, version counter and timestamps.

    Keys are ``{_pk_prefix}{id}`` / ``META`` unless a subclass overrides
    ``get_pk`` or ``get_sk``. Secondary index attributes come from
    ``get_index_keys``.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
        extra="ignore",
    )

    _pk_prefix: ClassVar[str] = ""

    id: str = Field(default_factory=generate_ulid)
    version: int = Field(default=1, description="Incremented on every versioned write")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_dynamodb(self) -> dict[str, Any]:
        """Item attributes (without keys). Nested value objects use their aliases."""
        return _to_attribute(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_dynamodb(cls, item: dict[str, Any]) -> Self:
        """Build a model from a raw item; PK, SK and GSI attributes are ignored."""
        return cls.model_validate(_from_attribute(item))

    def get_pk(self) -> str:
        return f"{self._pk_prefix}{self.id}"

    def get_sk(self) -> str:
        return "META"

    def get_keys(self) -> dict[str, str]:
        return {"PK": self.get_pk(), "SK": self.get_sk()}

    def get_index_keys(self) -> dict[str, str]:
        """GSI key attributes for this entity (none by default)."""
        return {}

    def update_timestamp(self) -> None:
        self.updated_at = utc_now()

    def increment_version(self) -> None:
        self.version += 1
