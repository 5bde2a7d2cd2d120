import asyncio

import pytest

from inspection_forms.errors import InvalidInputError
from inspection_forms.models import FormTemplate
from inspection_forms.synthesis.engine import GenerationRule, TemplateSynthesisEngine
from inspection_forms.synthesis.library import TemplateLibrary, generic_template


def test_apartment_prompt_selects_apartment_cleaning(engine):
    template = asyncio.run(engine.generate_template("Create inspection form for 2-bedroom apartment cleaning"))
    assert template.industry == "property-management"
    assert len(template.sections) >= 5
    assert template.confidence >= 0.9
    assert [s.order for s in template.sections] == list(range(len(template.sections)))


def test_restaurant_prompt_and_context_matching(engine):
    direct = asyncio.run(engine.generate_template("Health check for a food truck"))
    assert direct.industry == "food-service"
    via_context = asyncio.run(engine.generate_template("make it thorough", "User: we run a restaurant"))
    assert via_context.industry == "food-service"


def test_first_matching_rule_wins(engine):
    template = asyncio.run(engine.generate_template("restaurant deep cleaning checklist"))
    assert template.industry == "property-management"


def test_unmatched_prompt_yields_generic_template(engine):
    template = asyncio.run(engine.generate_template("warehouse forklift audit"))
    assert template.industry == "general"
    assert template.confidence == pytest.approx(0.8)
    assert [s.title for s in template.sections] == ["General Information", "Inspection Items"]


@pytest.mark.parametrize("description", ["", "   ", "x" * 1001])
def test_invalid_descriptions_rejected(engine, description):
    with pytest.raises(InvalidInputError):
        asyncio.run(engine.generate_template(description))


def test_description_at_limit_is_accepted(engine):
    assert asyncio.run(engine.generate_template("y" * 1000)).industry == "general"


def test_library_copies_are_isolated(engine):
    first = asyncio.run(engine.generate_template("apartment"))
    modified = asyncio.run(engine.modify_template(first, "add a safety section"))
    again = asyncio.run(engine.generate_template("apartment"))
    assert len(again.sections) == len(first.sections)
    assert len(modified.sections) == len(first.sections) + 1


def test_modify_adds_safety_section(engine):
    template = asyncio.run(engine.generate_template("apartment cleaning"))
    updated = asyncio.run(engine.modify_template(template, "add a safety section"))
    assert len(updated.sections) == len(template.sections) + 1
    assert updated.sections[-1].title == "Safety Assessment"
    assert updated.sections[-1].order == len(template.sections)
    assert updated.version == template.version + 1
    assert updated.confidence == pytest.approx(0.95)


def test_modify_applies_every_matching_rule_in_order(engine):
    template = generic_template()
    updated = asyncio.run(engine.modify_template(template, "Add bathroom and dining checks plus a photo"))
    titles = [s.title for s in updated.sections[len(template.sections):]]
    assert titles == ["Bathroom Facilities", "Dining Area"]
    assert updated.sections[-1].fields[-1].label == "Additional Photos"
    assert updated.sections[-1].fields[-1].type == "photo"


def test_generic_section_rule(engine):
    template = generic_template()
    updated = asyncio.run(engine.modify_template(template, "add more"))
    assert updated.sections[-1].title == "Additional Inspection Items"
    storage = asyncio.run(engine.modify_template(template, "add a utility section"))
    assert [s.title for s in storage.sections[2:]] == ["Storage & Utility Areas"]


def test_unmatched_modification_only_bumps_metadata(engine):
    template = generic_template()
    updated = asyncio.run(engine.modify_template(template, "make the colours nicer"))
    assert updated.sections == template.sections
    assert updated.version == template.version + 1
    assert updated.confidence == pytest.approx(0.85)
    assert updated.updated_at >= template.updated_at


def test_confidence_is_capped(engine):
    template = generic_template().model_copy(update={"confidence": 0.93})
    updated = asyncio.run(engine.modify_template(template, "add safety"))
    assert updated.confidence == pytest.approx(0.95)


def test_modify_requires_template_and_instruction(engine):
    with pytest.raises(InvalidInputError):
        asyncio.run(engine.modify_template(None, "add safety"))
    with pytest.raises(InvalidInputError):
        asyncio.run(engine.modify_template(generic_template(), ""))


def test_photo_rule_without_sections_is_noop(engine):
    empty = FormTemplate(title="Blank")
    updated = asyncio.run(engine.modify_template(empty, "add photo"))
    assert updated.sections == []


def test_rule_tables_are_extensible():
    def pool_template() -> FormTemplate:
        return FormTemplate(title="Pool Inspection", industry="leisure", confidence=0.9)

    engine = TemplateSynthesisEngine(
        TemplateLibrary({"pool": pool_template}),
        generation_rules=[GenerationRule("pool", lambda text: "pool" in text, "pool")],
        generate_delay_sec=0,
    )
    assert engine.classify("Pool safety") == "pool"
    assert asyncio.run(engine.generate_template("pool safety")).industry == "leisure"
    assert [t.title for t in engine.industry_templates()] == ["Pool Inspection"]


def test_simulated_latency_is_awaited(monkeypatch):
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr("inspection_forms.synthesis.engine.anyio.sleep", fake_sleep)
    engine = TemplateSynthesisEngine(generate_delay_sec=1.5, modify_delay_sec=1.0)
    template = asyncio.run(engine.generate_template("apartment"))
    asyncio.run(engine.modify_template(template, "add safety"))
    assert slept == [1.5, 1.0]
