"""
Industry template library.

Each factory builds a brand-new template (fresh ids) from static section specs.
`TemplateLibrary` builds every registered template once and hands out deep copies.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Sequence

from inspection_forms.models import FormField, FormSection, FormTemplate, new_id, utc_now

SectionSpec = Mapping[str, Any]
TemplateFactory = Callable[[], FormTemplate]

_RATING = {"min": 1, "max": 5}


def build_section(spec: SectionSpec, order: int = 0) -> FormSection:
    return FormSection(
        id=new_id(),
        title=spec["title"],
        description=spec.get("description"),
        order=order,
        fields=[FormField.model_validate({**f, "id": new_id()}) for f in spec.get("fields", [])],
    )


def build_template(
    *,
    name: str,
    industry: str,
    description: str,
    confidence: float,
    sections: Sequence[SectionSpec],
) -> FormTemplate:
    now = utc_now()
    return FormTemplate(
        id=new_id(),
        title=name,
        description=description,
        industry=industry,
        confidence=confidence,
        sections=[build_section(s, i) for i, s in enumerate(sections)],
        created_at=now,
        updated_at=now,
    )


APARTMENT_CLEANING_SECTIONS: List[SectionSpec] = [
    {
        "title": "General Information",
        "fields": [
            {"type": "text", "label": "Property Address", "required": True, "placeholder": "Enter full address"},
            {
                "type": "select",
                "label": "Number of Bedrooms",
                "required": True,
                "options": ["Studio", "1 Bedroom", "2 Bedrooms", "3 Bedrooms", "4+ Bedrooms"],
            },
            {
                "type": "select",
                "label": "Number of Bathrooms",
                "required": True,
                "options": ["1 Bath", "1.5 Baths", "2 Baths", "2.5 Baths", "3+ Baths"],
            },
        ],
    },
    {
        "title": "Kitchen Inspection",
        "fields": [
            {
                "type": "checkbox",
                "label": "Kitchen Areas Cleaned",
                "required": True,
                "options": [
                    "Countertops",
                    "Sink",
                    "Stovetop",
                    "Oven",
                    "Refrigerator",
                    "Dishwasher",
                    "Cabinets",
                    "Floor",
                ],
            },
            {"type": "rating", "label": "Overall Kitchen Cleanliness", "required": True, "validation": _RATING},
            {"type": "photo", "label": "Kitchen Photos", "required": False},
        ],
    },
    {
        "title": "Living Areas",
        "fields": [
            {
                "type": "checkbox",
                "label": "Living Room Tasks",
                "required": True,
                "options": ["Vacuumed/Mopped", "Dusted surfaces", "Cleaned windows", "Organized items"],
            },
            {"type": "rating", "label": "Living Room Cleanliness", "required": True, "validation": _RATING},
        ],
    },
    {
        "title": "Bedrooms",
        "fields": [
            {
                "type": "checkbox",
                "label": "Bedroom Cleaning Tasks",
                "required": True,
                "options": ["Bed made", "Floors cleaned", "Dusted surfaces", "Closet organized"],
            },
            {"type": "rating", "label": "Bedroom Cleanliness", "required": True, "validation": _RATING},
        ],
    },
    {
        "title": "Bathrooms",
        "fields": [
            {
                "type": "checkbox",
                "label": "Bathroom Cleaning Tasks",
                "required": True,
                "options": ["Toilet cleaned", "Shower/tub cleaned", "Sink cleaned", "Mirror cleaned", "Floor mopped"],
            },
            {"type": "rating", "label": "Bathroom Cleanliness", "required": True, "validation": _RATING},
        ],
    },
    {
        "title": "Final Assessment",
        "fields": [
            {"type": "rating", "label": "Overall Satisfaction", "required": True, "validation": _RATING},
            {
                "type": "textarea",
                "label": "Additional Notes",
                "required": False,
                "placeholder": "Any additional comments or concerns",
            },
            {"type": "signature", "label": "Inspector Signature", "required": True},
        ],
    },
]

RESTAURANT_SECTIONS: List[SectionSpec] = [
    {
        "title": "Basic Information",
        "fields": [
            {"type": "text", "label": "Restaurant Name", "required": True},
            {"type": "text", "label": "License Number", "required": True},
            {
                "type": "select",
                "label": "Restaurant Type",
                "required": True,
                "options": ["Fast Food", "Casual Dining", "Fine Dining", "Cafe", "Bar/Grill"],
            },
        ],
    },
    {
        "title": "Food Safety",
        "fields": [
            {
                "type": "checkbox",
                "label": "Food Temperature Control",
                "required": True,
                "options": ["Proper refrigeration", "Hot food holding", "Thermometer available", "Temperature logs"],
            },
            {"type": "rating", "label": "Food Safety Compliance", "required": True, "validation": _RATING},
        ],
    },
    {
        "title": "Cleanliness",
        "fields": [
            {
                "type": "checkbox",
                "label": "Cleaning Standards",
                "required": True,
                "options": ["Kitchen surfaces", "Equipment sanitized", "Floors clean", "Hand washing stations"],
            },
            {"type": "photo", "label": "Kitchen Photos", "required": False},
        ],
    },
]

GENERIC_SECTIONS: List[SectionSpec] = [
    {
        "title": "General Information",
        "fields": [
            {"type": "text", "label": "Location/Property Name", "required": True},
            {"type": "text", "label": "Inspector Name", "required": True},
            {"type": "text", "label": "Inspection Date", "required": True},
        ],
    },
    {
        "title": "Inspection Items",
        "fields": [
            {"type": "rating", "label": "Overall Condition", "required": True, "validation": _RATING},
            {
                "type": "textarea",
                "label": "Notes",
                "required": False,
                "placeholder": "Add any additional notes or observations",
            },
            {"type": "photo", "label": "Supporting Photos", "required": False},
        ],
    },
]

GENERIC_CONFIDENCE = 0.8


def apartment_cleaning_template() -> FormTemplate:
    return build_template(
        name="Apartment Cleaning Inspection",
        industry="property-management",
        description="Comprehensive inspection form for apartment cleaning services",
        confidence=0.95,
        sections=APARTMENT_CLEANING_SECTIONS,
    )


def restaurant_template() -> FormTemplate:
    return build_template(
        name="Restaurant Health Inspection",
        industry="food-service",
        description="Health and safety inspection form for restaurants",
        confidence=0.92,
        sections=RESTAURANT_SECTIONS,
    )


def generic_template() -> FormTemplate:
    return build_template(
        name="Custom Inspection Form",
        industry="general",
        description="AI-generated inspection form based on your requirements",
        confidence=GENERIC_CONFIDENCE,
        sections=GENERIC_SECTIONS,
    )


DEFAULT_FACTORIES: Dict[str, TemplateFactory] = {
    "apartment-cleaning": apartment_cleaning_template,
    "restaurant": restaurant_template,
}


class TemplateLibrary:
    """Named templates built once at construction; lookups return deep copies."""

    def __init__(self, factories: Mapping[str, TemplateFactory] = DEFAULT_FACTORIES) -> None:
        self._templates: Dict[str, FormTemplate] = {key: factory() for key, factory in factories.items()}

    def keys(self) -> List[str]:
        return list(self._templates)

    def get(self, key: str) -> FormTemplate:
        try:
            return self._templates[key].model_copy(deep=True)
        except KeyError:
            raise KeyError(f"Unknown template: {key!r}") from None

    def all(self) -> List[FormTemplate]:
        return [t.model_copy(deep=True) for t in self._templates.values()]
