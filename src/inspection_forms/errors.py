from __future__ import annotations


class InspectionFormsError(Exception):
    """Base class for errors raised by the form engine."""


class InvalidInputError(InspectionFormsError, ValueError):
    """Caller supplied an empty, oversized or missing argument."""


class FormNotFoundError(InspectionFormsError, LookupError):
    def __init__(self, form_id: str) -> None:
        super().__init__(f"Form not found: {form_id}")
        self.form_id = form_id


class StorageError(InspectionFormsError):
    """No storage backend could serve the request."""


class SessionBusyError(InspectionFormsError):
    """A generation request is already in flight for this session."""
