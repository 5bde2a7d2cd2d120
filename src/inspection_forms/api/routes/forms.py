from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse, Response

from inspection_forms.api.models import UpdateFormRequest
from inspection_forms.errors import FormNotFoundError
from inspection_forms.models import InspectionForm
from inspection_forms.storage.service import FormService

router = APIRouter(prefix="/api/forms", tags=["forms"])


def _service(request: Request) -> FormService:
    return request.app.state.form_service


@router.get("")
async def list_forms(request: Request) -> Dict[str, Any]:
    service = _service(request)
    forms = await service.list_forms()
    return {"ok": True, "degraded": service.degraded, "forms": [f.to_record() for f in forms]}


@router.get("/{form_id}")
async def get_form(form_id: str, request: Request) -> Dict[str, Any]:
    form = await _service(request).get_form(form_id)
    if form is None:
        raise FormNotFoundError(form_id)
    return {"ok": True, "form": form.to_record()}


@router.post("", status_code=201)
async def create_form(request: Request, form: InspectionForm = Body(...)) -> Dict[str, Any]:
    created = await _service(request).create_form(form)
    return {"ok": True, "form": created.to_record()}


@router.patch("/{form_id}")
async def update_form(form_id: str, request: Request, body: UpdateFormRequest = Body(...)) -> Dict[str, Any]:
    updated = await _service(request).update_form(form_id, body.changes())
    return {"ok": True, "form": updated.to_record()}


@router.delete("/{form_id}")
async def delete_form(form_id: str, request: Request) -> Response:
    await _service(request).delete_form(form_id)
    return JSONResponse({"ok": True})
