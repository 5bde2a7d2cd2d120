"""
Row translation between `InspectionForm` and the `inspection_forms` table.

`sections` and `settings` are stored as opaque JSON payloads (camelCase keys);
timestamps always go through ISO-8601 strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping

from inspection_forms.models import DEFAULT_USER_ID, InspectionForm

TABLE_NAME = "inspection_forms"

COLUMNS = (
    "id",
    "title",
    "description",
    "industry",
    "sections",
    "created_by",
    "created_at",
    "updated_at",
    "version",
    "is_template",
    "is_published",
    "settings",
)


def _iso(value: datetime) -> str:
    return value.isoformat()


def to_database(form: InspectionForm) -> Dict[str, Any]:
    record = form.to_record()
    return {
        "id": form.id,
        "title": form.title,
        "description": form.description or None,
        "industry": form.industry,
        "sections": record["sections"],
        "created_by": form.created_by or DEFAULT_USER_ID,
        "created_at": _iso(form.created_at),
        "updated_at": _iso(form.updated_at),
        "version": form.version,
        "is_template": form.is_template,
        "is_published": form.is_published,
        "settings": record["settings"],
    }


def from_database(row: Mapping[str, Any]) -> InspectionForm:
    return InspectionForm.model_validate(
        {
            "id": row["id"],
            "title": row["title"],
            "description": row.get("description"),
            "industry": row.get("industry") or "general",
            "sections": row.get("sections") or [],
            "created_by": row.get("created_by") or DEFAULT_USER_ID,
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
            "version": row.get("version") or 1,
            "is_template": bool(row.get("is_template")),
            "is_published": bool(row.get("is_published")),
            "settings": row.get("settings") or {},
        }
    )
