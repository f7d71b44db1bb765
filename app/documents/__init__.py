from .models import MarkupLine, ResumeBlock
from .structure import is_likely_header, is_section_title, structure_resume
from .themes import THEMES, Theme, resolve_theme

__all__ = [
    "MarkupLine",
    "ResumeBlock",
    "is_likely_header",
    "is_section_title",
    "structure_resume",
    "THEMES",
    "Theme",
    "resolve_theme",
]
