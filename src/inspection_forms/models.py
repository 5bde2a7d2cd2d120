from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

FieldType = Literal["text", "textarea", "select", "checkbox", "radio", "rating", "photo", "video", "signature"]

FIELD_TYPES: tuple[str, ...] = (
    "text",
    "textarea",
    "select",
    "checkbox",
    "radio",
    "rating",
    "photo",
    "video",
    "signature",
)
CHOICE_FIELD_TYPES = frozenset({"select", "checkbox", "radio"})

DEFAULT_USER_ID = "demo-user"

_M = TypeVar("_M", bound=BaseModel)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Model(BaseModel):
    # camelCase on the wire, snake_case in Python; instances are never mutated in place.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FieldValidation(_Model):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "FieldValidation":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"validation.min ({self.min}) must not exceed validation.max ({self.max})")
        return self


class FieldCondition(_Model):
    depends_on_field_id: str
    condition: str
    value: Any = None


class FormField(_Model):
    """A single input specification inside a section."""

    id: str = Field(default_factory=new_id)
    type: FieldType
    label: str
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[List[str]] = None
    validation: Optional[FieldValidation] = None
    conditional: Optional[FieldCondition] = None

    @model_validator(mode="after")
    def _check_options(self) -> "FormField":
        if self.options is not None and not self.options:
            raise ValueError("options must not be empty when present")
        if self.type in CHOICE_FIELD_TYPES and not self.options:
            raise ValueError(f"{self.type} fields require at least one option")
        return self


class FormSection(_Model):
    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)
    order: int = 0

    @field_validator("fields")
    @classmethod
    def _unique_field_ids(cls, fields: List[FormField]) -> List[FormField]:
        _ensure_unique([f.id for f in fields], "field")
        return fields


class FormSettings(_Model):
    allow_offline: bool = True
    require_location: bool = True
    require_signature: bool = False
    auto_save: bool = True


class InspectionForm(_Model):
    """
    Root document being authored.

    `sections` position is authoritative; each section's `order` mirrors it and is
    re-derived whenever the sequence changes (see `mutations`).
    """

    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    industry: str = "general"
    sections: List[FormSection] = Field(default_factory=list)
    created_by: str = DEFAULT_USER_ID
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=1, ge=1)
    is_template: bool = False
    is_published: bool = False
    settings: FormSettings = Field(default_factory=FormSettings)

    @field_validator("sections")
    @classmethod
    def _unique_section_ids(cls, sections: List[FormSection]) -> List[FormSection]:
        _ensure_unique([s.id for s in sections], "section")
        return sections

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_timestamps(self) -> "InspectionForm":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not precede createdAt")
        return self

    def to_record(self) -> Dict[str, Any]:
        """JSON-safe camelCase dict with ISO-8601 timestamps."""
        return self.model_dump(mode="json", by_alias=True)


class FormTemplate(InspectionForm):
    """Form-shaped starting point produced by the synthesis engine."""

    is_template: bool = True
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    suggested_fields: List[FormField] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.title


def merge_model(model: _M, updates: Mapping[str, Any], *, cls: Optional[Type[_M]] = None) -> _M:
    """
    Apply a partial update (snake_case or camelCase keys) and re-validate.

    Unknown keys are ignored. Raises `pydantic.ValidationError` if the result breaks an invariant.
    """
    target = cls or type(model)
    by_key: Dict[str, str] = {}
    for name, info in target.model_fields.items():
        by_key[name] = name
        if info.alias:
            by_key[info.alias] = name
    data = model.model_dump()
    for key, value in updates.items():
        name = by_key.get(str(key))
        if name is not None:
            data[name] = value
    return target.model_validate(data)


def _ensure_unique(ids: List[str], kind: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise ValueError(f"duplicate {kind} id: {item_id}")
        seen.add(item_id)
