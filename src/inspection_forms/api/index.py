"""
ASGI entrypoint: `uvicorn inspection_forms.api.index:app`.
"""

from __future__ import annotations

from inspection_forms.api.main import create_app

app = create_app()
