from collections import Counter

import pytest
from pydantic import ValidationError

from inspection_forms.models import FormTemplate
from inspection_forms.mutations import (
    add_field,
    add_section,
    default_field_spec,
    delete_field,
    delete_section,
    find_field,
    form_from_template,
    publish,
    reorder_fields,
    reorder_sections,
    update_field,
    update_section,
)


def _without_updated_at(form):
    return form.model_dump(exclude={"updated_at"})


def test_add_section_appends_with_dense_order(sample_form):
    out = add_section(sample_form, "Balcony", "Outdoor space")
    assert len(out.sections) == 3
    assert out.sections[-1].title == "Balcony"
    assert [s.order for s in out.sections] == [0, 1, 2]
    assert len(sample_form.sections) == 2
    assert out.updated_at >= sample_form.updated_at


def test_add_then_delete_section_restores_form(sample_form):
    added = add_section(sample_form, "Temporary")
    restored = delete_section(added, added.sections[-1].id)
    assert _without_updated_at(restored) == _without_updated_at(sample_form)


def test_delete_section_renumbers_order(sample_form):
    form = add_section(sample_form, "Balcony")
    out = delete_section(form, form.sections[0].id)
    assert [s.title for s in out.sections] == ["Bathroom", "Balcony"]
    assert [s.order for s in out.sections] == [0, 1]


def test_add_then_delete_field_restores_sequence(sample_form):
    section_id = sample_form.sections[0].id
    added = add_field(sample_form, section_id, {"type": "photo", "label": "Oven photo", "id": "ignored"})
    new_field = added.sections[0].fields[-1]
    assert new_field.id != "ignored"
    restored = delete_field(added, section_id, new_field.id)
    assert restored.sections[0].fields == sample_form.sections[0].fields


def test_not_found_targets_return_input_unchanged(sample_form):
    section_id = sample_form.sections[0].id
    assert add_field(sample_form, "missing", {"type": "text", "label": "x"}) is sample_form
    assert update_field(sample_form, section_id, "missing", {"label": "x"}) is sample_form
    assert update_field(sample_form, "missing", "missing", {"label": "x"}) is sample_form
    assert delete_field(sample_form, section_id, "missing") is sample_form
    assert delete_section(sample_form, "missing") is sample_form
    assert update_section(sample_form, "missing", {"title": "x"}) is sample_form
    assert reorder_fields(sample_form, sample_form.sections[1].id, 0, 1) is sample_form


def test_update_field_merges_partial(sample_form):
    section = sample_form.sections[0]
    target = section.fields[0]
    out = update_field(sample_form, section.id, target.id, {"label": "Lead inspector", "placeholder": "Full name"})
    updated = find_field(out, section.id, target.id)
    assert updated.label == "Lead inspector"
    assert updated.placeholder == "Full name"
    assert updated.required is True
    assert find_field(sample_form, section.id, target.id).label == "Inspector"


def test_update_field_rejects_broken_invariants(sample_form):
    section = sample_form.sections[0]
    rating = section.fields[1]
    with pytest.raises(ValidationError):
        update_field(sample_form, section.id, rating.id, {"validation": {"min": 9, "max": 2}})


def test_update_section_only_touches_title_and_description(sample_form):
    section = sample_form.sections[0]
    out = update_section(sample_form, section.id, {"title": "Kitchen & Pantry", "order": 7, "fields": []})
    assert out.sections[0].title == "Kitchen & Pantry"
    assert out.sections[0].order == 0
    assert out.sections[0].fields == section.fields


def test_reorder_fields_moves_and_preserves_ids(sample_form):
    section = sample_form.sections[0]
    ids = [f.id for f in section.fields]
    out = reorder_fields(sample_form, section.id, 0, 2)
    new_ids = [f.id for f in out.sections[0].fields]
    assert new_ids == [ids[1], ids[2], ids[0]]
    assert Counter(new_ids) == Counter(ids)


@pytest.mark.parametrize("src,dst", [(-5, 1), (0, 99), (99, -3), (1, 1)])
def test_reorder_fields_clamps_out_of_range_indices(sample_form, src, dst):
    section = sample_form.sections[0]
    out = reorder_fields(sample_form, section.id, src, dst)
    assert Counter(f.id for f in out.sections[0].fields) == Counter(f.id for f in section.fields)


def test_reorder_sections_rederives_order(sample_form):
    form = add_section(sample_form, "Balcony")
    out = reorder_sections(form, 2, 0)
    assert [s.title for s in out.sections] == ["Balcony", "Kitchen", "Bathroom"]
    assert [s.order for s in out.sections] == [0, 1, 2]


def test_publish_is_idempotent(sample_form):
    once = publish(sample_form)
    twice = publish(once)
    assert once.is_published is True
    assert twice.is_published is True
    assert sample_form.is_published is False


def test_default_field_spec_by_type(sample_form):
    assert default_field_spec("radio")["options"] == ["Option 1", "Option 2", "Option 3"]
    assert default_field_spec("rating")["validation"] == {"min": 1, "max": 5}
    assert default_field_spec("signature") == {"type": "signature", "label": "New signature field", "required": False}
    with pytest.raises(ValueError):
        default_field_spec("slider")
    for field_type in ("select", "rating", "video"):
        out = add_field(sample_form, sample_form.sections[1].id, default_field_spec(field_type))
        assert out.sections[1].fields[-1].type == field_type


def test_form_from_template_builds_fresh_envelope():
    template = FormTemplate(title="Pool Check", industry="leisure", confidence=0.9, version=4, sections=[])
    form = form_from_template(template, created_by="inspector-7")
    assert form.id != template.id
    assert form.title == "Pool Check"
    assert form.version == 1
    assert form.is_template is False
    assert form.is_published is False
    assert form.created_by == "inspector-7"
    assert template.version == 4
