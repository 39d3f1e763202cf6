"""Lead form schema attached to templates and pages."""

from enum import Enum

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FormFieldType(str, Enum):
    """Supported form field types."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    HIDDEN = "hidden"


class FormFieldOption(PydanticBaseModel):
    value: str
    label: str


class FormFieldConfig(PydanticBaseModel):
    """A single field of a lead form.

    Stored and served with camelCase keys (``helperText``,
    ``optionalSection``) so the editor can read them unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
        use_enum_values=True,
    )

    id: str = Field(..., min_length=1)
    type: FormFieldType
    label: str = ""
    placeholder: str | None = None
    required: bool = False
    order: int | None = None
    options: list[FormFieldOption] | None = None
    helper_text: str | None = None
    optional_section: bool = Field(
        default=False,
        description="Rendered in the frosted 'optional' panel",
    )


class FormSchema(PydanticBaseModel):
    """Ordered collection of form fields."""

    fields: list[FormFieldConfig] = Field(default_factory=list)

    def ordered_fields(self) -> list[FormFieldConfig]:
        """Fields sorted by ``order``, falling back to list position."""
        return [
            f for _, f in sorted(
                enumerate(self.fields),
                key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]),
            )
        ]

    def is_empty(self) -> bool:
        return not self.fields
