from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from inspection_forms.models import FormTemplate


class GenerateTemplateRequest(BaseModel):
    """Free-text prompt plus the running conversation transcript."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(default="", description="What the inspection form is for")
    context: Optional[str] = Field(default=None, description="Earlier conversation turns, one per line")


class ModifyTemplateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    template: Optional[FormTemplate] = None
    instruction: str = Field(default="", description="Edit request, e.g. 'add a safety section'")


class UpdateFormRequest(BaseModel):
    """Partial form update; keys may be camelCase or snake_case."""

    model_config = ConfigDict(extra="allow")

    def changes(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})
