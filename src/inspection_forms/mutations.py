"""
Pure edit operations over an `InspectionForm` tree.

Every function returns a new form and never touches its input. When the target
section or field does not exist, the *same* form object is returned unchanged,
so callers can detect a no-op with `result is form`.

Index arguments to the reorder functions are clamped into range.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from inspection_forms.models import (
    CHOICE_FIELD_TYPES,
    DEFAULT_USER_ID,
    FIELD_TYPES,
    FormField,
    FormSection,
    FormSettings,
    FormTemplate,
    InspectionForm,
    merge_model,
    new_id,
    utc_now,
)


def create_form(
    title: str,
    industry: str = "general",
    *,
    description: Optional[str] = None,
    created_by: str = DEFAULT_USER_ID,
) -> InspectionForm:
    now = utc_now()
    return InspectionForm(
        title=title,
        description=description,
        industry=industry,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )


def form_from_template(template: FormTemplate, *, created_by: str = DEFAULT_USER_ID) -> InspectionForm:
    """Wrap a template's sections in a fresh, unpublished form envelope."""
    now = utc_now()
    return InspectionForm(
        title=template.title,
        description=template.description,
        industry=template.industry,
        sections=list(template.sections),
        created_by=created_by,
        created_at=now,
        updated_at=now,
        version=1,
        is_template=False,
        is_published=False,
        settings=FormSettings(),
    )


def default_field_spec(field_type: str) -> Dict[str, Any]:
    """Palette defaults for a freshly added field of `field_type`."""
    if field_type not in FIELD_TYPES:
        raise ValueError(f"Unknown field type: {field_type!r}")
    spec: Dict[str, Any] = {"type": field_type, "label": f"New {field_type} field", "required": False}
    if field_type in CHOICE_FIELD_TYPES:
        spec["options"] = ["Option 1", "Option 2", "Option 3"]
    if field_type == "rating":
        spec["validation"] = {"min": 1, "max": 5}
    return spec


def find_section(form: InspectionForm, section_id: str) -> Optional[FormSection]:
    for section in form.sections:
        if section.id == section_id:
            return section
    return None


def find_field(form: InspectionForm, section_id: str, field_id: str) -> Optional[FormField]:
    section = find_section(form, section_id)
    if section is None:
        return None
    for field in section.fields:
        if field.id == field_id:
            return field
    return None


def add_section(form: InspectionForm, title: str, description: Optional[str] = None) -> InspectionForm:
    section = FormSection(title=title, description=description, order=len(form.sections))
    return _with_sections(form, [*form.sections, section])


def update_section(form: InspectionForm, section_id: str, updates: Mapping[str, Any]) -> InspectionForm:
    """Edit a section's own attributes; `id`, `fields` and `order` are not changed here."""
    section = find_section(form, section_id)
    if section is None:
        return form
    allowed = {k: v for k, v in updates.items() if k in {"title", "description"}}
    updated = merge_model(section, allowed)
    return _replace_section(form, updated)


def delete_section(form: InspectionForm, section_id: str) -> InspectionForm:
    if find_section(form, section_id) is None:
        return form
    return _with_sections(form, [s for s in form.sections if s.id != section_id])


def reorder_sections(form: InspectionForm, from_index: int, to_index: int) -> InspectionForm:
    if not form.sections:
        return form
    return _with_sections(form, _move(form.sections, from_index, to_index))


def add_field(form: InspectionForm, section_id: str, field_spec: Mapping[str, Any]) -> InspectionForm:
    """Append a new field built from `field_spec`; any `id` in the spec is replaced."""
    section = find_section(form, section_id)
    if section is None:
        return form
    spec = {k: v for k, v in field_spec.items() if k != "id"}
    field = FormField.model_validate({**spec, "id": new_id()})
    return _replace_section(form, section.model_copy(update={"fields": [*section.fields, field]}))


def update_field(
    form: InspectionForm,
    section_id: str,
    field_id: str,
    updates: Mapping[str, Any],
) -> InspectionForm:
    section = find_section(form, section_id)
    if section is None:
        return form
    fields: List[FormField] = []
    found = False
    for field in section.fields:
        if field.id == field_id:
            field = merge_model(field, {k: v for k, v in updates.items() if k != "id"})
            found = True
        fields.append(field)
    if not found:
        return form
    return _replace_section(form, section.model_copy(update={"fields": fields}))


def delete_field(form: InspectionForm, section_id: str, field_id: str) -> InspectionForm:
    section = find_section(form, section_id)
    if section is None or all(f.id != field_id for f in section.fields):
        return form
    fields = [f for f in section.fields if f.id != field_id]
    return _replace_section(form, section.model_copy(update={"fields": fields}))


def reorder_fields(form: InspectionForm, section_id: str, from_index: int, to_index: int) -> InspectionForm:
    section = find_section(form, section_id)
    if section is None or not section.fields:
        return form
    fields = _move(section.fields, from_index, to_index)
    return _replace_section(form, section.model_copy(update={"fields": fields}))


def publish(form: InspectionForm) -> InspectionForm:
    return form.model_copy(update={"is_published": True, "updated_at": utc_now()})


def _clamp(index: int, size: int) -> int:
    return max(0, min(int(index), size - 1))


def _move(items: Sequence[Any], from_index: int, to_index: int) -> List[Any]:
    out = list(items)
    moved = out.pop(_clamp(from_index, len(out)))
    out.insert(_clamp(to_index, len(items)), moved)
    return out


def _replace_section(form: InspectionForm, section: FormSection) -> InspectionForm:
    return _with_sections(form, [section if s.id == section.id else s for s in form.sections])


def _with_sections(form: InspectionForm, sections: List[FormSection]) -> InspectionForm:
    # Re-stamp every section's order from its position.
    renumbered = [s if s.order == i else s.model_copy(update={"order": i}) for i, s in enumerate(sections)]
    return form.model_copy(update={"sections": renumbered, "updated_at": utc_now()})
