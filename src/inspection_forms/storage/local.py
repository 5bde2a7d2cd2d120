from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import ValidationError

from inspection_forms.errors import FormNotFoundError, StorageError
from inspection_forms.models import InspectionForm, merge_model

logger = logging.getLogger(__name__)

STORAGE_KEY = "inspectionForms"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """One `<key>.json` file per key under `directory`."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class LocalFormStore:
    """
    All forms live in a single serialized collection under `STORAGE_KEY`.

    An absent or unreadable collection reads as empty; an unreadable one is also discarded.
    Write failures surface as `StorageError` since there is nothing left to fall back to.
    """

    def __init__(self, storage: KeyValueStorage, *, key: str = STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key

    def _load(self) -> List[InspectionForm]:
        try:
            raw = self.storage.get_item(self.key)
        except UnicodeDecodeError as e:
            logger.warning("Discarding undecodable local form collection %r: %s", self.key, e)
            self._discard()
            return []
        except OSError as e:
            raise StorageError(f"Local storage unreadable: {e}") from e
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored collection is not a list")
            return [InspectionForm.model_validate(item) for item in data]
        except (ValueError, ValidationError) as e:
            logger.warning("Discarding corrupt local form collection %r: %s", self.key, e)
            self._discard()
            return []

    def _discard(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except OSError as e:
            logger.warning("Could not remove corrupt local collection %r: %s", self.key, e)

    def _save(self, forms: List[InspectionForm]) -> None:
        payload: List[Dict[str, Any]] = [f.to_record() for f in forms]
        try:
            self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))
        except OSError as e:
            raise StorageError(f"Local storage write failed: {e}") from e

    async def list(self) -> List[InspectionForm]:
        return sorted(self._load(), key=lambda f: f.created_at, reverse=True)

    async def get(self, form_id: str) -> Optional[InspectionForm]:
        for form in self._load():
            if form.id == form_id:
                return form
        return None

    async def create(self, form: InspectionForm) -> InspectionForm:
        forms = [f for f in self._load() if f.id != form.id]
        forms.insert(0, form)
        self._save(forms)
        return form

    async def update(self, form_id: str, updates: Mapping[str, Any]) -> InspectionForm:
        forms = self._load()
        for i, form in enumerate(forms):
            if form.id == form_id:
                updated = merge_model(form, {**updates, "id": form_id})
                forms[i] = updated
                self._save(forms)
                return updated
        raise FormNotFoundError(form_id)

    async def delete(self, form_id: str) -> None:
        forms = self._load()
        remaining = [f for f in forms if f.id != form_id]
        if len(remaining) != len(forms):
            self._save(remaining)
