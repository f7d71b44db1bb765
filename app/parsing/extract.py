from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from zipfile import ZipFile

import defusedxml.ElementTree as ET

from app.core.errors import ExtractionError, LegacyDocumentError, UnsupportedMediaTypeError
from .models import (
    ALLOWED_MEDIA_TYPES,
    DOC_MEDIA_TYPE,
    DOCX_MEDIA_TYPE,
    FILE_TYPE_LABELS,
    PDF_MEDIA_TYPE,
    TEXT_MEDIA_TYPE,
    ExtractedDocument,
    normalize_media_type,
)

logger = logging.getLogger(__name__)

LEGACY_DOC_MESSAGE = "Unable to process legacy DOC file. Please convert to DOCX format."


def file_type_label(media_type: str) -> str:
    return FILE_TYPE_LABELS.get(normalize_media_type(media_type), "Unknown")


def ensure_supported_media_type(media_type: str | None) -> str:
    normalized = normalize_media_type(media_type)
    if normalized not in ALLOWED_MEDIA_TYPES:
        raise UnsupportedMediaTypeError("Invalid file type. Only PDF, DOC, DOCX, and TXT files are allowed.")
    return normalized


def _normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _extract_plain_text(content: bytes) -> tuple[str, str]:
    text = content.decode("utf-8", errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]
    return text, "utf-8"


def _extract_docx_text_fallback(content: bytes) -> str:
    with ZipFile(BytesIO(content)) as archive:
        raw = archive.read("word/document.xml")
    root = ET.fromstring(raw)
    paragraphs: list[str] = []
    for paragraph in root.iter():
        if not paragraph.tag.endswith("}p"):
            continue
        texts: list[str] = []
        for node in paragraph.iter():
            if node.tag.endswith("}t") and node.text:
                texts.append(node.text)
        joined = "".join(texts).strip()
        if joined:
            paragraphs.append(joined)
    return "\n".join(paragraphs)


def _docx_body_lines(document) -> list[str]:
    # Walk the body in order so table text keeps its position between paragraphs.
    from docx.table import Table
    from docx.text.paragraph import Paragraph

    lines: list[str] = []
    for child in document.element.body.iterchildren():
        tag = child.tag.rsplit("}", 1)[-1]
        if tag == "p":
            value = Paragraph(child, document).text.strip()
            if value:
                lines.append(value)
        elif tag == "tbl":
            for row in Table(child, document).rows:
                cells: list[str] = []
                for cell in row.cells:
                    value = cell.text.strip()
                    if value and value not in cells:
                        cells.append(value)
                if cells:
                    lines.append(" | ".join(cells))
    return lines


def _extract_docx_text(content: bytes) -> tuple[str, str]:
    try:
        from docx import Document

        document = Document(BytesIO(content))
        return "\n".join(_docx_body_lines(document)), "python-docx"
    except Exception:
        return _extract_docx_text_fallback(content), "zipxml-fallback"


def _extract_pdf_text(content: bytes) -> tuple[str, str]:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    page_chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text.strip():
            page_chunks.append(page_text)
    return "\n\n".join(page_chunks), "pypdf"


def extract_document(content: bytes, media_type: str, filename: str) -> ExtractedDocument:
    """Convert an uploaded file into plain text.

    The media type is the one declared by the client. Image-only PDFs come back
    with empty text; callers decide whether that is an error.
    """
    normalized_type = ensure_supported_media_type(media_type)
    warnings: list[str] = []

    if normalized_type == TEXT_MEDIA_TYPE:
        text, parser = _extract_plain_text(content)
    elif normalized_type == DOCX_MEDIA_TYPE:
        try:
            text, parser = _extract_docx_text(content)
        except Exception as exc:
            logger.warning("docx_extraction_failed file=%s: %s", filename, exc)
            raise ExtractionError(
                f"Failed to extract text from {filename}. Please check the file and try again.",
                filename=filename,
                cause=exc,
            ) from exc
    elif normalized_type == DOC_MEDIA_TYPE:
        try:
            text, parser = _extract_docx_text(content)
        except Exception as exc:
            logger.info("legacy_doc_extraction_failed file=%s: %s", filename, exc)
            raise LegacyDocumentError(LEGACY_DOC_MESSAGE, filename=filename, cause=exc) from exc
        warnings.append("Legacy DOC was read with the DOCX parser.")
    elif normalized_type == PDF_MEDIA_TYPE:
        try:
            text, parser = _extract_pdf_text(content)
        except Exception as exc:
            logger.warning("pdf_extraction_failed file=%s: %s", filename, exc)
            raise ExtractionError(
                f"Failed to extract text from {filename}. Please check the file and try again.",
                filename=filename,
                cause=exc,
            ) from exc
        if not text.strip():
            warnings.append("No embedded text layer found in PDF.")
    else:  # pragma: no cover - ensure_supported_media_type guards this
        raise UnsupportedMediaTypeError(f"Unsupported file type: {normalized_type}")

    return ExtractedDocument(
        filename=filename,
        media_type=normalized_type,
        file_type=file_type_label(normalized_type),
        text=_normalize_line_endings(text),
        parser=parser,
        warnings=warnings,
    )


async def extract_document_async(content: bytes, media_type: str, filename: str) -> ExtractedDocument:
    return await asyncio.to_thread(extract_document, content, media_type, filename)
