from __future__ import annotations

from typing import List, Optional

from inspection_forms.errors import InvalidInputError, SessionBusyError
from inspection_forms.models import DEFAULT_USER_ID, FormTemplate, InspectionForm
from inspection_forms.mutations import delete_field, delete_section, form_from_template
from inspection_forms.synthesis.engine import MAX_DESCRIPTION_LENGTH, TemplateSynthesisEngine

MODIFICATION_KEYWORDS = ("add", "modify", "change", "remove", "update", "more")


def sanitize_input(text: str) -> str:
    return str(text or "").strip()[:MAX_DESCRIPTION_LENGTH]


class GenerationSession:
    """
    Conversational front end over `TemplateSynthesisEngine`.

    Keeps the running transcript passed as generation context and the current
    template that modification requests apply to. One request at a time.
    """

    def __init__(self, engine: TemplateSynthesisEngine) -> None:
        self.engine = engine
        self.transcript: List[str] = []
        self.current_template: Optional[FormTemplate] = None
        self.busy = False

    @property
    def context(self) -> str:
        return "\n".join(self.transcript)

    def is_modification_request(self, message: str) -> bool:
        if self.current_template is None:
            return False
        lowered = message.lower()
        return any(word in lowered for word in MODIFICATION_KEYWORDS)

    async def send(self, message: str) -> FormTemplate:
        text = sanitize_input(message)
        if not text:
            raise InvalidInputError("Message cannot be empty")
        if self.busy:
            raise SessionBusyError("A generation request is already in progress")

        self.busy = True
        try:
            self.transcript.append(f"User: {text}")
            if self.is_modification_request(text):
                template = await self.engine.modify_template(self.current_template, text)
            else:
                template = await self.engine.generate_template(text, self.context)
            self.current_template = template
            return template
        finally:
            self.busy = False

    def remove_section(self, section_id: str) -> Optional[FormTemplate]:
        if self.current_template is not None:
            self.current_template = delete_section(self.current_template, section_id)
        return self.current_template

    def remove_field(self, section_id: str, field_id: str) -> Optional[FormTemplate]:
        if self.current_template is not None:
            self.current_template = delete_field(self.current_template, section_id, field_id)
        return self.current_template

    def accept(self, *, created_by: str = DEFAULT_USER_ID) -> InspectionForm:
        """Turn the current template into a new form and reset the conversation."""
        if self.current_template is None:
            raise InvalidInputError("No template to accept")
        form = form_from_template(self.current_template, created_by=created_by)
        self.clear()
        return form

    def clear(self) -> None:
        self.transcript = []
        self.current_template = None
