from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.documents.models import ResumeBlock


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResumeAnalysis(CamelModel):
    experience_level: str = "Entry Level"
    skill_count: int = Field(default=0, ge=0)
    industry: str = "General"
    key_skills: list[str] = Field(default_factory=list)


class JobAnalysis(CamelModel):
    required_skills: list[str] = Field(default_factory=list)
    experience_level: str = "Entry Level"
    industry: str = "General"
    key_requirements: list[str] = Field(default_factory=list)


class Improvements(CamelModel):
    match_score: int = Field(default=50, ge=0, le=100)
    keywords_added: int = Field(default=0, ge=0)
    sections_improved: int = Field(default=0, ge=0)
    improvements_list: list[str] = Field(default_factory=list)


class OptimizationResult(CamelModel):
    optimized_content: str
    improvements: Improvements


class ResumeRecord(CamelModel):
    id: int
    original_filename: str
    original_content: str
    file_type: str
    uploaded_at: datetime


class JobDescriptionRecord(CamelModel):
    id: int
    content: str
    analysis: JobAnalysis | None = None
    created_at: datetime

    @property
    def is_analyzed(self) -> bool:
        return self.analysis is not None


class OptimizationRecord(CamelModel):
    id: int
    resume_id: int
    job_description_id: int
    optimized_content: str
    improvements: Improvements
    match_score: int = Field(ge=0, le=100)
    created_at: datetime


class UploadResponse(CamelModel):
    resume_id: int
    filename: str
    file_type: str
    analysis: ResumeAnalysis
    success: bool = True


class AnalyzeJobRequest(CamelModel):
    content: Any = None


class AnalyzeJobResponse(CamelModel):
    job_description_id: int
    analysis: JobAnalysis
    success: bool = True


class OptimizeRequest(CamelModel):
    resume_id: int | None = None
    job_description_id: int | None = None


class OptimizeResponse(CamelModel):
    optimization_id: int
    original_content: str
    optimized_content: str
    improvements: Improvements
    success: bool = True


class OptimizationSummary(CamelModel):
    optimization_id: int
    job_description_id: int
    match_score: int
    created_at: datetime


class ResumeOptimizationsResponse(CamelModel):
    resume_id: int
    optimizations: list[OptimizationSummary] = Field(default_factory=list)


class OptimizationBlocksResponse(CamelModel):
    optimization_id: int
    blocks: list[ResumeBlock] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
