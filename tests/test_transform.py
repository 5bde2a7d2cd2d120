from inspection_forms.models import DEFAULT_USER_ID, InspectionForm
from inspection_forms.mutations import publish
from inspection_forms.storage.transform import COLUMNS, from_database, to_database


def test_to_database_uses_snake_case_columns(sample_form):
    row = to_database(sample_form)
    assert tuple(row) == COLUMNS
    assert row["created_at"] == sample_form.created_at.isoformat()
    assert row["sections"][0]["fields"][1]["validation"] == {"min": 1.0, "max": 5.0, "pattern": None}
    assert row["settings"]["allowOffline"] is True


def test_round_trip_is_stable(sample_form):
    for form in (sample_form, publish(sample_form), InspectionForm(title="Empty", description="")):
        row = to_database(form)
        assert to_database(from_database(row)) == row


def test_from_database_rehydrates_and_defaults():
    form = from_database(
        {
            "id": "abc",
            "title": "Legacy",
            "description": None,
            "industry": "general",
            "sections": None,
            "created_by": None,
            "created_at": "2024-05-01T10:00:00+00:00",
            "updated_at": "2024-05-02T10:00:00+00:00",
            "version": 3,
            "is_template": False,
            "is_published": True,
            "settings": None,
        }
    )
    assert form.sections == []
    assert form.created_by == DEFAULT_USER_ID
    assert form.created_at.year == 2024 and form.created_at.tzinfo is not None
    assert form.version == 3
    assert form.is_published is True
    assert form.settings.auto_save is True


def test_empty_description_is_stored_as_null():
    assert to_database(InspectionForm(title="F", description=""))["description"] is None
