from __future__ import annotations

import logging
from typing import Any

from app.core.config import settings
from app.core.errors import (
    EmptyContentError,
    NotFoundError,
    OptimizerError,
    RenderError,
    ValidationError,
)
from app.core.session_store import SessionStore, store as default_store
from app.documents import render
from app.documents.structure import structure_resume
from app.documents.themes import resolve_theme
from app.parsing.extract import ensure_supported_media_type, extract_document_async
from app.schemas.optimizer import (
    AnalyzeJobResponse,
    OptimizationBlocksResponse,
    OptimizationSummary,
    OptimizeResponse,
    ResumeOptimizationsResponse,
    UploadResponse,
)
from app.services import resume_llm

logger = logging.getLogger(__name__)


class DocumentDownload:
    __slots__ = ("content", "filename", "media_type")

    def __init__(self, *, content: bytes, filename: str, media_type: str):
        self.content = content
        self.filename = filename
        self.media_type = media_type


def validate_upload(*, filename: str | None, media_type: str | None, size: int) -> str:
    if size > settings.max_upload_bytes:
        raise ValidationError(
            f"File too large. Maximum allowed size is {settings.max_upload_mb} MB.",
            status_code=413,
            code="file_too_large",
        )
    if not filename:
        raise ValidationError("No file uploaded")
    return ensure_supported_media_type(media_type)


def parse_record_id(value: Any, *, label: str) -> int:
    try:
        record_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise NotFoundError(f"{label} not found") from None
    if record_id < 1:
        raise NotFoundError(f"{label} not found")
    return record_id


async def upload_resume(
    *,
    filename: str,
    media_type: str,
    content: bytes,
    session_store: SessionStore | None = None,
) -> UploadResponse:
    session = session_store or default_store
    normalized_type = validate_upload(filename=filename, media_type=media_type, size=len(content))

    extracted = await extract_document_async(content, normalized_type, filename)
    if extracted.is_empty:
        logger.info(
            "resume_upload_empty file=%s file_type=%s parser=%s warnings=%s",
            filename,
            extracted.file_type,
            extracted.parser,
            extracted.warnings,
        )
        raise EmptyContentError("Unable to extract text from the uploaded file")

    analysis = await resume_llm.analyze_resume(extracted.text)
    record = session.create_resume(
        original_filename=filename,
        original_content=extracted.text,
        file_type=extracted.file_type,
    )
    logger.info(
        "resume_uploaded id=%s file_type=%s parser=%s chars=%s warnings=%s",
        record.id,
        record.file_type,
        extracted.parser,
        len(extracted.text),
        extracted.warnings,
    )
    return UploadResponse(
        resume_id=record.id,
        filename=filename,
        file_type=record.file_type,
        analysis=analysis,
    )


def validate_job_description(content: Any) -> str:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Job description content is required")
    limit = settings.job_description_max_chars
    if len(content) > limit:
        raise ValidationError(f"Job description is too long (max {limit} characters)")
    return content.strip()


async def analyze_job(content: Any, *, session_store: SessionStore | None = None) -> AnalyzeJobResponse:
    session = session_store or default_store
    cleaned = validate_job_description(content)

    record = session.create_job_description(content=cleaned)
    analysis = await resume_llm.analyze_job_description(cleaned)
    record = session.attach_job_analysis(record.id, analysis) or record
    logger.info("job_description_analyzed id=%s chars=%s", record.id, len(cleaned))
    return AnalyzeJobResponse(job_description_id=record.id, analysis=analysis)


async def optimize(
    resume_id: Any,
    job_description_id: Any,
    *,
    session_store: SessionStore | None = None,
) -> OptimizeResponse:
    session = session_store or default_store
    if resume_id is None or job_description_id is None:
        raise ValidationError("Resume ID and Job Description ID are required")

    resume = session.get_resume(parse_record_id(resume_id, label="Resume"))
    if resume is None:
        raise NotFoundError("Resume not found")
    job_description = session.get_job_description(parse_record_id(job_description_id, label="Job description"))
    if job_description is None:
        raise NotFoundError("Job description not found")

    result = await resume_llm.optimize_resume(resume.original_content, job_description.content)
    record = session.create_optimization(
        resume_id=resume.id,
        job_description_id=job_description.id,
        optimized_content=result.optimized_content,
        improvements=result.improvements,
    )
    logger.info(
        "resume_optimized id=%s resume_id=%s job_description_id=%s match_score=%s",
        record.id,
        resume.id,
        job_description.id,
        record.match_score,
    )
    return OptimizeResponse(
        optimization_id=record.id,
        original_content=resume.original_content,
        optimized_content=record.optimized_content,
        improvements=record.improvements,
    )


async def build_download(
    optimization_id: Any,
    *,
    theme: str | None = None,
    session_store: SessionStore | None = None,
) -> DocumentDownload:
    session = session_store or default_store
    optimization = session.get_optimization(parse_record_id(optimization_id, label="Optimization"))
    if optimization is None:
        raise NotFoundError("Optimization not found")
    resume = session.get_resume(optimization.resume_id)
    if resume is None:
        raise NotFoundError("Resume not found")

    use_markup = theme is not None or render.looks_like_markup(optimization.optimized_content)
    try:
        if use_markup:
            content = await render.render_markup_docx_async(optimization.optimized_content, resolve_theme(theme))
        else:
            content = await render.render_resume_docx_async(optimization.optimized_content)
    except OptimizerError:
        raise
    except Exception as exc:
        logger.exception("download_render_failed optimization_id=%s", optimization.id)
        raise RenderError("Failed to generate download") from exc

    filename = render.optimized_filename(resume.original_filename)
    logger.info(
        "download_rendered optimization_id=%s theme=%s bytes=%s",
        optimization.id,
        resolve_theme(theme).name if use_markup else "structured",
        len(content),
    )
    return DocumentDownload(content=content, filename=filename, media_type=render.DOCX_MEDIA_TYPE)


def list_resume_optimizations(resume_id: Any, *, session_store: SessionStore | None = None) -> ResumeOptimizationsResponse:
    session = session_store or default_store
    resume = session.get_resume(parse_record_id(resume_id, label="Resume"))
    if resume is None:
        raise NotFoundError("Resume not found")
    records = sorted(session.get_optimizations_by_resume_id(resume.id), key=lambda record: record.id)
    return ResumeOptimizationsResponse(
        resume_id=resume.id,
        optimizations=[
            OptimizationSummary(
                optimization_id=record.id,
                job_description_id=record.job_description_id,
                match_score=record.match_score,
                created_at=record.created_at,
            )
            for record in records
        ],
    )


def preview_optimization_blocks(
    optimization_id: Any,
    *,
    session_store: SessionStore | None = None,
) -> OptimizationBlocksResponse:
    session = session_store or default_store
    optimization = session.get_optimization(parse_record_id(optimization_id, label="Optimization"))
    if optimization is None:
        raise NotFoundError("Optimization not found")
    return OptimizationBlocksResponse(
        optimization_id=optimization.id,
        blocks=structure_resume(optimization.optimized_content),
    )

