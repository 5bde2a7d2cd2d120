from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
_SRC = _REPO_ROOT / "src"
if _SRC.exists():
    sys.path.insert(0, str(_SRC))

from inspection_forms.mutations import add_field, add_section, create_form  # noqa: E402
from inspection_forms.synthesis.engine import TemplateSynthesisEngine  # noqa: E402


@pytest.fixture
def engine() -> TemplateSynthesisEngine:
    return TemplateSynthesisEngine(generate_delay_sec=0, modify_delay_sec=0)


@pytest.fixture
def sample_form():
    form = create_form("Unit 4B move-out", "property-management")
    form = add_section(form, "Kitchen", "Appliances and surfaces")
    form = add_section(form, "Bathroom")
    kitchen = form.sections[0].id
    form = add_field(form, kitchen, {"type": "text", "label": "Inspector", "required": True})
    form = add_field(form, kitchen, {"type": "rating", "label": "Oven", "validation": {"min": 1, "max": 5}})
    form = add_field(form, kitchen, {"type": "select", "label": "Sink", "options": ["Clean", "Dirty"]})
    return form
