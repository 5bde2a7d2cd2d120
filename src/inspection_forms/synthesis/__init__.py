from inspection_forms.synthesis.engine import TemplateSynthesisEngine
from inspection_forms.synthesis.library import TemplateLibrary
from inspection_forms.synthesis.session import GenerationSession

__all__ = ["GenerationSession", "TemplateLibrary", "TemplateSynthesisEngine"]
