from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import Response

from app.core.config import settings
from app.core.errors import ValidationError
from app.core.rate_limit import rate_limit
from app.documents.render import content_disposition
from app.schemas.optimizer import (
    AnalyzeJobRequest,
    AnalyzeJobResponse,
    OptimizationBlocksResponse,
    OptimizeRequest,
    OptimizeResponse,
    ResumeOptimizationsResponse,
    UploadResponse,
)
from app.services import optimizer_service

router = APIRouter()

UPLOAD_CHUNK_BYTES = 1024 * 64


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise ValidationError(
                f"File too large. Maximum allowed size is {settings.max_upload_mb} MB.",
                status_code=413,
                code="file_too_large",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/upload", response_model=UploadResponse)
@rate_limit()
async def upload_resume(request: Request, resume: UploadFile | None = File(default=None)):
    _ = request
    if resume is None or not resume.filename:
        raise ValidationError("No file uploaded")

    optimizer_service.validate_upload(filename=resume.filename, media_type=resume.content_type, size=0)
    payload = await _read_upload(resume)
    return await optimizer_service.upload_resume(
        filename=resume.filename,
        media_type=resume.content_type or "",
        content=payload,
    )


@router.post("/analyze-job", response_model=AnalyzeJobResponse)
@rate_limit()
async def analyze_job(request: Request, payload: AnalyzeJobRequest):
    _ = request
    return await optimizer_service.analyze_job(payload.content)


@router.post("/optimize", response_model=OptimizeResponse)
@rate_limit()
async def optimize(request: Request, payload: OptimizeRequest):
    _ = request
    return await optimizer_service.optimize(payload.resume_id, payload.job_description_id)


@router.get("/download/{optimization_id}")
@rate_limit()
async def download(request: Request, optimization_id: str, theme: str | None = Query(default=None)):
    _ = request
    document = await optimizer_service.build_download(optimization_id, theme=theme)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": content_disposition(document.filename)},
    )


@router.get("/resumes/{resume_id}/optimizations", response_model=ResumeOptimizationsResponse)
async def resume_optimizations(resume_id: str):
    return optimizer_service.list_resume_optimizations(resume_id)


@router.get("/optimizations/{optimization_id}/blocks", response_model=OptimizationBlocksResponse)
async def optimization_blocks(optimization_id: str):
    return optimizer_service.preview_optimization_blocks(optimization_id)
