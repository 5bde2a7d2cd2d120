from inspection_forms.storage.local import JsonFileStorage, LocalFormStore, MemoryStorage
from inspection_forms.storage.service import CircuitBreaker, FormService, build_form_service
from inspection_forms.storage.transform import from_database, to_database

__all__ = [
    "CircuitBreaker",
    "FormService",
    "JsonFileStorage",
    "LocalFormStore",
    "MemoryStorage",
    "build_form_service",
    "from_database",
    "to_database",
]
