from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

PDF_MEDIA_TYPE = "application/pdf"
DOC_MEDIA_TYPE = "application/msword"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MEDIA_TYPE = "text/plain"

FILE_TYPE_LABELS = {
    PDF_MEDIA_TYPE: "PDF",
    DOC_MEDIA_TYPE: "DOC",
    DOCX_MEDIA_TYPE: "DOCX",
    TEXT_MEDIA_TYPE: "TXT",
}

ALLOWED_MEDIA_TYPES = frozenset(FILE_TYPE_LABELS)


def normalize_media_type(media_type: str | None) -> str:
    return (media_type or "").split(";")[0].strip().lower()


class ExtractedDocument(BaseModel):
    filename: str
    media_type: str
    file_type: str
    text: str
    parser: str
    warnings: list[str] = Field(default_factory=list)

    @field_validator("file_type")
    @classmethod
    def _validate_file_type(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in set(FILE_TYPE_LABELS.values()):
            raise ValueError("file_type must be one of: PDF, DOC, DOCX, TXT")
        return normalized

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()
