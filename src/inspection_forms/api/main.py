from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from inspection_forms import __version__
from inspection_forms.api.routes import forms, health, templates
from inspection_forms.config import Settings, configure_logging
from inspection_forms.errors import FormNotFoundError, InvalidInputError, SessionBusyError, StorageError
from inspection_forms.storage.service import FormService, build_form_service
from inspection_forms.synthesis.engine import TemplateSynthesisEngine

logger = logging.getLogger(__name__)


def _repo_root() -> Path:
    # `src/inspection_forms/api/main.py`
    return Path(__file__).resolve().parents[3]


def _request_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def _error(status: int, error: str, message: str, prefix: str, **extra: Any) -> JSONResponse:
    content: Dict[str, Any] = {"ok": False, "error": error, "message": message, "requestId": _request_id(prefix)}
    content.update(extra)
    return JSONResponse(status_code=status, content=content)


def create_app(
    *,
    settings: Optional[Settings] = None,
    form_service: Optional[FormService] = None,
    synthesis_engine: Optional[TemplateSynthesisEngine] = None,
) -> FastAPI:
    """
    Build the API app.

    Services are constructed from `settings` (env + `.env` files by default) unless
    injected, which is how tests supply isolated in-memory instances.
    """
    settings = settings or Settings.from_env(env_dir=_repo_root())
    configure_logging(settings)

    app = FastAPI(title="inspection-forms", version=__version__)
    app.state.settings = settings
    app.state.form_service = form_service or build_form_service(settings)
    app.state.synthesis_engine = synthesis_engine or TemplateSynthesisEngine(
        generate_delay_sec=settings.generate_delay_sec,
        modify_delay_sec=settings.modify_delay_sec,
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("422 validation_error path=%s errors=%s", request.url.path, exc.errors())
        return _error(
            422,
            "validation_error",
            "Request body did not match expected schema.",
            "val",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def _model_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("422 validation_error path=%s errors=%s", request.url.path, exc.errors())
        return _error(
            422,
            "validation_error",
            "Update would produce an invalid form.",
            "val",
            details=jsonable_encoder(exc.errors(include_url=False)),
        )

    @app.exception_handler(InvalidInputError)
    async def _invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return _error(HTTP_400_BAD_REQUEST, "invalid_input", str(exc), "inv")

    @app.exception_handler(SessionBusyError)
    async def _busy_handler(request: Request, exc: SessionBusyError) -> JSONResponse:
        return _error(HTTP_400_BAD_REQUEST, "busy", str(exc), "busy")

    @app.exception_handler(FormNotFoundError)
    async def _not_found_handler(request: Request, exc: FormNotFoundError) -> JSONResponse:
        return _error(HTTP_404_NOT_FOUND, "not_found", str(exc), "nf")

    @app.exception_handler(StorageError)
    async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("503 storage_unavailable path=%s err=%r", request.url.path, exc)
        return _error(HTTP_503_SERVICE_UNAVAILABLE, "storage_unavailable", str(exc), "sto")

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("500 internal_error path=%s", request.url.path)
        return _error(HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Unhandled server error.", "err")

    app.include_router(health.router)
    app.include_router(forms.router)
    app.include_router(templates.router)
    return app
