from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from inspection_forms.models import FormField, FormSection, FormTemplate, InspectionForm, merge_model


def test_choice_fields_require_options():
    with pytest.raises(ValidationError):
        FormField(type="select", label="Condition")
    with pytest.raises(ValidationError):
        FormField(type="radio", label="Condition", options=[])
    assert FormField(type="checkbox", label="Tasks", options=["Floor"]).options == ["Floor"]


def test_validation_bounds_must_be_ordered():
    with pytest.raises(ValidationError):
        FormField(type="rating", label="Score", validation={"min": 5, "max": 1})
    field = FormField(type="rating", label="Score", validation={"min": 1, "max": 5})
    assert field.validation.min == 1 and field.validation.max == 5


def test_duplicate_ids_rejected():
    f = FormField(id="f1", type="text", label="A")
    with pytest.raises(ValidationError):
        FormSection(title="S", fields=[f, f])
    s = FormSection(id="s1", title="S")
    with pytest.raises(ValidationError):
        InspectionForm(title="F", sections=[s, s])


def test_updated_at_cannot_precede_created_at():
    now = datetime.now(timezone.utc)
    with pytest.raises(ValidationError):
        InspectionForm(title="F", created_at=now, updated_at=now - timedelta(seconds=1))


def test_naive_timestamps_are_read_as_utc():
    form = InspectionForm.model_validate(
        {"title": "F", "createdAt": "2024-05-01T08:00:00", "updatedAt": "2024-05-01T09:00:00+00:00"}
    )
    assert form.created_at == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        InspectionForm.model_validate({"title": "F", "createdAt": "2024-05-01T10:00:00", "updatedAt": "2024-05-01T09:00:00Z"})


def test_record_uses_camel_case_and_iso_timestamps():
    form = InspectionForm(
        title="F",
        sections=[
            FormSection(
                title="S",
                fields=[
                    FormField(
                        type="text",
                        label="Shown when damaged",
                        conditional={"depends_on_field_id": "f0", "condition": "equals", "value": "yes"},
                    )
                ],
            )
        ],
    )
    record = form.to_record()
    assert {"createdBy", "createdAt", "isPublished", "isTemplate"} <= set(record)
    assert isinstance(record["createdAt"], str)
    assert record["settings"] == {
        "allowOffline": True,
        "requireLocation": True,
        "requireSignature": False,
        "autoSave": True,
    }
    assert record["sections"][0]["fields"][0]["conditional"]["dependsOnFieldId"] == "f0"
    assert InspectionForm.model_validate(record) == form


def test_models_are_immutable():
    form = InspectionForm(title="F")
    with pytest.raises(ValidationError):
        form.title = "G"


def test_merge_model_accepts_both_key_styles_and_ignores_unknown():
    form = InspectionForm(title="F")
    merged = merge_model(form, {"isPublished": True, "description": "d", "bogus": 1})
    assert merged.is_published is True
    assert merged.description == "d"
    assert merged.id == form.id
    assert form.is_published is False


def test_template_defaults():
    template = FormTemplate(title="T", confidence=0.9)
    assert template.is_template is True
    assert template.name == "T"
    assert template.suggested_fields == []
    with pytest.raises(ValidationError):
        FormTemplate(title="T", confidence=1.5)
