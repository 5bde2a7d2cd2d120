"""
Rule-based template synthesis.

This is a closed-set classifier, not a language model:
- generation: ordered `(predicate, template key)` rules, first match wins, generic template otherwise
- modification: ordered `(predicate, transform)` rules, every match applies in declaration order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import anyio

from inspection_forms.errors import InvalidInputError
from inspection_forms.models import FormField, FormTemplate, new_id, utc_now
from inspection_forms.synthesis.library import SectionSpec, TemplateLibrary, build_section, generic_template

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000
CONFIDENCE_STEP = 0.05
CONFIDENCE_CAP = 0.95

Predicate = Callable[[str], bool]
Transform = Callable[[FormTemplate], FormTemplate]


def contains_any(*words: str) -> Predicate:
    return lambda text: any(w in text for w in words)


def both(first: Predicate, second: Predicate) -> Predicate:
    return lambda text: first(text) and second(text)


@dataclass(frozen=True)
class GenerationRule:
    name: str
    matches: Predicate
    template_key: str


@dataclass(frozen=True)
class ModificationRule:
    name: str
    matches: Predicate
    apply: Transform
    adds_section: bool = False
    # Only fires when no earlier rule in the same pass added a section.
    only_if_no_section_added: bool = False


def append_section(spec: SectionSpec) -> Transform:
    def _apply(template: FormTemplate) -> FormTemplate:
        section = build_section(spec, order=len(template.sections))
        return template.model_copy(update={"sections": [*template.sections, section]})

    return _apply


def append_field_to_last_section(field_spec: dict) -> Transform:
    def _apply(template: FormTemplate) -> FormTemplate:
        if not template.sections:
            return template
        last = template.sections[-1]
        field = FormField.model_validate({**field_spec, "id": new_id()})
        sections = [*template.sections[:-1], last.model_copy(update={"fields": [*last.fields, field]})]
        return template.model_copy(update={"sections": sections})

    return _apply


_RATING = {"min": 1, "max": 5}

SAFETY_SECTION: SectionSpec = {
    "title": "Safety Assessment",
    "fields": [
        {
            "type": "checkbox",
            "label": "Safety Checks",
            "required": True,
            "options": ["Emergency exits clear", "Fire extinguisher present", "Safety equipment available"],
        },
        {"type": "rating", "label": "Overall Safety Rating", "required": True, "validation": _RATING},
    ],
}

BATHROOM_SECTION: SectionSpec = {
    "title": "Bathroom Facilities",
    "fields": [
        {
            "type": "checkbox",
            "label": "Bathroom Cleanliness",
            "required": True,
            "options": [
                "Toilets clean",
                "Sinks clean",
                "Floors mopped",
                "Supplies stocked",
                "Hand soap available",
                "Paper towels available",
            ],
        },
        {"type": "rating", "label": "Bathroom Condition", "required": True, "validation": _RATING},
        {"type": "photo", "label": "Bathroom Photos", "required": False},
    ],
}

STORAGE_SECTION: SectionSpec = {
    "title": "Storage & Utility Areas",
    "fields": [
        {
            "type": "checkbox",
            "label": "Storage Area Checks",
            "required": True,
            "options": ["Well organized", "Clean floors", "Proper ventilation", "No pest signs", "Adequate lighting"],
        },
        {"type": "rating", "label": "Storage Area Rating", "required": True, "validation": _RATING},
    ],
}

DINING_SECTION: SectionSpec = {
    "title": "Dining Area",
    "fields": [
        {
            "type": "checkbox",
            "label": "Dining Area Checks",
            "required": True,
            "options": [
                "Tables clean",
                "Chairs in good condition",
                "Floor clean",
                "Lighting adequate",
                "Temperature comfortable",
            ],
        },
        {"type": "rating", "label": "Dining Area Rating", "required": True, "validation": _RATING},
    ],
}

ADDITIONAL_SECTION: SectionSpec = {
    "title": "Additional Inspection Items",
    "fields": [
        {
            "type": "textarea",
            "label": "Additional Notes",
            "required": False,
            "placeholder": "Add any additional observations",
        },
        {"type": "rating", "label": "Additional Rating", "required": False, "validation": _RATING},
    ],
}

PHOTO_FIELD = {"type": "photo", "label": "Additional Photos", "required": False}

DEFAULT_GENERATION_RULES: List[GenerationRule] = [
    GenerationRule("apartment-cleaning", contains_any("apartment", "cleaning"), "apartment-cleaning"),
    GenerationRule("restaurant", contains_any("restaurant", "food"), "restaurant"),
]

_adds = contains_any("add")

DEFAULT_MODIFICATION_RULES: List[ModificationRule] = [
    ModificationRule("safety", both(_adds, contains_any("safety")), append_section(SAFETY_SECTION), adds_section=True),
    ModificationRule(
        "bathroom", both(_adds, contains_any("bathroom")), append_section(BATHROOM_SECTION), adds_section=True
    ),
    ModificationRule(
        "storage", both(_adds, contains_any("storage", "utility")), append_section(STORAGE_SECTION), adds_section=True
    ),
    ModificationRule("dining", both(_adds, contains_any("dining")), append_section(DINING_SECTION), adds_section=True),
    ModificationRule("photo", both(_adds, contains_any("photo")), append_field_to_last_section(PHOTO_FIELD)),
    ModificationRule(
        "additional-section",
        both(_adds, contains_any("section", "more")),
        append_section(ADDITIONAL_SECTION),
        adds_section=True,
        only_if_no_section_added=True,
    ),
]


class TemplateSynthesisEngine:
    def __init__(
        self,
        library: Optional[TemplateLibrary] = None,
        *,
        generation_rules: Sequence[GenerationRule] = DEFAULT_GENERATION_RULES,
        modification_rules: Sequence[ModificationRule] = DEFAULT_MODIFICATION_RULES,
        generate_delay_sec: float = 1.5,
        modify_delay_sec: float = 1.0,
    ) -> None:
        self.library = library or TemplateLibrary()
        self.generation_rules = list(generation_rules)
        self.modification_rules = list(modification_rules)
        self.generate_delay_sec = max(0.0, float(generate_delay_sec))
        self.modify_delay_sec = max(0.0, float(modify_delay_sec))

    def industry_templates(self) -> List[FormTemplate]:
        return self.library.all()

    def classify(self, description: str, context: Optional[str] = None) -> Optional[str]:
        """Library key of the first matching rule, or None for the generic template."""
        text = description.lower()
        ctx = (context or "").lower()
        for rule in self.generation_rules:
            if rule.matches(text) or rule.matches(ctx):
                return rule.template_key
        return None

    async def generate_template(self, description: str, context: Optional[str] = None) -> FormTemplate:
        if not isinstance(description, str):
            raise InvalidInputError("Invalid description provided")
        cleaned = description.strip()
        if not cleaned:
            raise InvalidInputError("Description cannot be empty")
        if len(cleaned) > MAX_DESCRIPTION_LENGTH:
            raise InvalidInputError(f"Description too long (max {MAX_DESCRIPTION_LENGTH} characters)")

        if self.generate_delay_sec:
            await anyio.sleep(self.generate_delay_sec)

        key = self.classify(cleaned, context)
        logger.debug("generate_template matched=%s", key or "generic")
        if key is None:
            return generic_template()
        return self.library.get(key)

    async def modify_template(self, template: Optional[FormTemplate], instruction: Optional[str]) -> FormTemplate:
        if template is None or not str(instruction or "").strip():
            raise InvalidInputError("Invalid template or modification provided")

        if self.modify_delay_sec:
            await anyio.sleep(self.modify_delay_sec)

        text = str(instruction).lower()
        updated = template
        section_added = False
        fired: List[str] = []
        for rule in self.modification_rules:
            if rule.only_if_no_section_added and section_added:
                continue
            if not rule.matches(text):
                continue
            updated = rule.apply(updated)
            section_added = section_added or rule.adds_section
            fired.append(rule.name)
        logger.debug("modify_template fired=%s", fired)

        return updated.model_copy(
            update={
                "updated_at": max(utc_now(), template.created_at),
                "version": template.version + 1,
                "confidence": min(CONFIDENCE_CAP, template.confidence + CONFIDENCE_STEP),
            }
        )
