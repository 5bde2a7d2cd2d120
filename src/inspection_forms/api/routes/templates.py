from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Request

from inspection_forms.api.models import GenerateTemplateRequest, ModifyTemplateRequest
from inspection_forms.synthesis.engine import TemplateSynthesisEngine

router = APIRouter(prefix="/api/templates", tags=["templates"])


def _engine(request: Request) -> TemplateSynthesisEngine:
    return request.app.state.synthesis_engine


def _template_payload(template: Any) -> Dict[str, Any]:
    record = template.to_record()
    record["name"] = template.name
    return record


@router.get("")
async def industry_templates(request: Request) -> Dict[str, Any]:
    return {"ok": True, "templates": [_template_payload(t) for t in _engine(request).industry_templates()]}


@router.post("/generate")
async def generate(request: Request, body: GenerateTemplateRequest = Body(...)) -> Dict[str, Any]:
    template = await _engine(request).generate_template(body.description, body.context)
    return {"ok": True, "template": _template_payload(template)}


@router.post("/modify")
async def modify(request: Request, body: ModifyTemplateRequest = Body(...)) -> Dict[str, Any]:
    template = await _engine(request).modify_template(body.template, body.instruction)
    return {"ok": True, "template": _template_payload(template)}
