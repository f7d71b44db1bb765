from __future__ import annotations

import asyncio
import logging
import re
from io import BytesIO
from urllib.parse import quote

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from app.core.errors import RenderError
from .models import MarkupLine, ResumeBlock
from .structure import structure_resume
from .themes import Theme, resolve_theme

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

HEADER_FONT = Pt(16)
SECTION_FONT = Pt(12)
BODY_FONT = Pt(11)
MARKUP_HEADING_FONT = Pt(14)
MARKUP_SUBHEADING_FONT = Pt(12)

BULLET_GLYPH = "•"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")
_UNSAFE_FILENAME_CHARS_RE = re.compile(r'[\\/"\r\n]+')
_XML_INVALID_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _add_bottom_border(paragraph, *, color: str = "000000") -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), color)
    borders.append(bottom)
    p_pr.append(borders)


def _add_run(paragraph, text: str, *, size, bold: bool = False, color: str | None = None):
    run = paragraph.add_run(_XML_INVALID_CHARS_RE.sub("", text))
    run.font.size = size
    run.bold = bold
    if color:
        run.font.color.rgb = RGBColor.from_string(color)
    return run


def _add_body_paragraph(document, text: str):
    paragraph = document.add_paragraph()
    _add_run(paragraph, text, size=BODY_FONT)
    paragraph.paragraph_format.space_after = Pt(5)
    return paragraph


def _add_header(document, block: ResumeBlock) -> None:
    paragraph = document.add_paragraph()
    _add_run(paragraph, block.content, size=HEADER_FONT, bold=True)
    paragraph.paragraph_format.space_after = Pt(10)
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER


def _add_section(document, block: ResumeBlock) -> None:
    paragraph = document.add_paragraph()
    # pBdr has to precede spacing inside pPr.
    _add_bottom_border(paragraph)
    _add_run(paragraph, block.content.upper(), size=SECTION_FONT, bold=True)
    paragraph.paragraph_format.space_before = Pt(15)
    paragraph.paragraph_format.space_after = Pt(5)
    for child in block.children:
        _add_body_paragraph(document, child.content)


def build_resume_document(blocks: list[ResumeBlock]):
    document = Document()
    for block in blocks:
        if block.type == "header":
            _add_header(document, block)
        elif block.type == "section":
            _add_section(document, block)
        else:
            _add_body_paragraph(document, block.content)
    return document


def classify_markup_line(line: str) -> MarkupLine:
    value = (line or "").rstrip()
    stripped = value.strip()
    if value.startswith("## "):
        return MarkupLine(kind="heading", text=value[3:].strip())
    if value.startswith("### "):
        return MarkupLine(kind="subheading", text=value[4:].strip())
    if stripped.startswith("**") and stripped.endswith("**"):
        return MarkupLine(kind="emphasis", text=stripped.replace("**", "").strip())
    if value.startswith("- "):
        return MarkupLine(kind="bullet", text=value[2:].strip())
    if not stripped:
        return MarkupLine(kind="break")
    return MarkupLine(kind="paragraph", text=stripped)


def looks_like_markup(text: str) -> bool:
    return any(line.startswith(("## ", "### ")) for line in (text or "").split("\n"))


def build_markup_document(text: str, theme: Theme):
    document = Document()
    for raw_line in (text or "").split("\n"):
        line = classify_markup_line(raw_line)
        paragraph = document.add_paragraph()
        if line.kind == "heading":
            _add_bottom_border(paragraph, color=theme.primary)
            _add_run(paragraph, line.text, size=MARKUP_HEADING_FONT, bold=True, color=theme.primary)
            paragraph.paragraph_format.space_before = Pt(12)
            paragraph.paragraph_format.space_after = Pt(4)
        elif line.kind == "subheading":
            _add_run(paragraph, line.text, size=MARKUP_SUBHEADING_FONT, bold=True, color=theme.secondary)
            paragraph.paragraph_format.space_before = Pt(6)
            paragraph.paragraph_format.space_after = Pt(2)
        elif line.kind == "emphasis":
            _add_run(paragraph, line.text, size=BODY_FONT, bold=True, color=theme.text)
            paragraph.paragraph_format.space_after = Pt(2)
        elif line.kind == "bullet":
            _add_run(paragraph, f"{BULLET_GLYPH} ", size=BODY_FONT, color=theme.accent)
            _add_run(paragraph, line.text, size=BODY_FONT, color=theme.text)
            paragraph.paragraph_format.left_indent = Pt(12)
            paragraph.paragraph_format.space_after = Pt(2)
        elif line.kind == "paragraph":
            _add_run(paragraph, line.text, size=BODY_FONT, color=theme.text)
            paragraph.paragraph_format.space_after = Pt(4)
    return document


def _serialize(document) -> bytes:
    buffer = BytesIO()
    try:
        document.save(buffer)
    except Exception as exc:
        logger.exception("docx_serialization_failed")
        raise RenderError("Failed to generate download") from exc
    return buffer.getvalue()


def render_resume_docx(text: str) -> bytes:
    return _serialize(build_resume_document(structure_resume(text)))


def render_markup_docx(text: str, theme: Theme | str | None = None) -> bytes:
    resolved = theme if isinstance(theme, Theme) else resolve_theme(theme)
    return _serialize(build_markup_document(text, resolved))


async def render_resume_docx_async(text: str) -> bytes:
    return await asyncio.to_thread(render_resume_docx, text)


async def render_markup_docx_async(text: str, theme: Theme | str | None = None) -> bytes:
    return await asyncio.to_thread(render_markup_docx, text, theme)


def optimized_filename(original_filename: str) -> str:
    base = (original_filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    stem = _EXTENSION_RE.sub("", base).strip() or "resume"
    return f"optimized_{stem}.docx"


def content_disposition(filename: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS_RE.sub("_", filename)
    ascii_name = cleaned.encode("ascii", "replace").decode("ascii").replace("?", "_")
    if ascii_name == cleaned:
        return f'attachment; filename="{ascii_name}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(cleaned)}"
