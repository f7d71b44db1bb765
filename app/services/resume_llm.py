from __future__ import annotations

import json
import logging
import math
import os
import time
from functools import lru_cache
from typing import Any

from openai import AsyncOpenAI

from app.core.errors import ExternalServiceError
from app.schemas.optimizer import Improvements, JobAnalysis, OptimizationResult, ResumeAnalysis

logger = logging.getLogger(__name__)

DEFAULT_EXPERIENCE_LEVEL = "Entry Level"
DEFAULT_INDUSTRY = "General"
DEFAULT_MATCH_SCORE = 50

RESUME_ANALYSIS_PROMPT = (
    "You are a professional resume analyzer. Analyze the resume content and provide structured analysis. "
    "Respond with JSON in this format: "
    "{ 'experienceLevel': string, 'skillCount': number, 'industry': string, 'keySkills': string[] }"
)

JOB_ANALYSIS_PROMPT = (
    "You are a job description analyzer. Extract key requirements and skills from job descriptions. "
    "Respond with JSON in this format: "
    "{ 'requiredSkills': string[], 'experienceLevel': string, 'industry': string, 'keyRequirements': string[] }"
)

OPTIMIZATION_PROMPT = """You are an expert resume optimizer. Your task is to optimize a resume to better match a specific job description while maintaining truthfulness and professionalism.

Guidelines:
1. Keep all factual information accurate - don't fabricate experience or skills
2. Enhance descriptions to highlight relevant experience and skills
3. Add relevant keywords from the job description where appropriate
4. Improve formatting and structure if needed
5. Quantify achievements where possible
6. Focus on accomplishments that match job requirements

Format the optimized resume as plain text lines:
- put the candidate name and contact details on the first lines
- start each section title line with "## " and each role or degree line with "### "
- start each bullet point with "- "
- wrap a standalone line in ** ** to emphasize it
- separate sections with a blank line

Respond with JSON in this format:
{
  "optimizedContent": "full optimized resume text",
  "improvements": {
    "matchScore": number (0-100),
    "keywordsAdded": number,
    "sectionsImproved": number,
    "improvementsList": ["improvement 1", "improvement 2", ...]
  }
}"""


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo", "default_key"}


def resume_llm_enabled() -> bool:
    if not _env_bool("RESUME_LLM_ENABLED", True):
        return False
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
        base_url=(os.getenv("OPENAI_BASE_URL") or None),
        timeout=float(os.getenv("OPENAI_TIMEOUT_S", "60")),
        max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2")),
    )


def _model() -> str:
    return (os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o").strip()


async def _json_completion(
    *,
    system_prompt: str,
    user_prompt: str,
    operation: str,
    timeout_s: float | None = None,
    max_output_tokens: int | None = None,
) -> dict[str, Any]:
    if not resume_llm_enabled():
        raise ExternalServiceError("AI analysis is not configured on this server.", code="llm_disabled")

    started = time.perf_counter()
    create_kwargs: dict[str, Any] = {
        "model": _model(),
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "response_format": {"type": "json_object"},
    }
    if max_output_tokens:
        create_kwargs["max_tokens"] = max_output_tokens

    try:
        client = _client()
        if timeout_s is not None:
            client = client.with_options(timeout=timeout_s)
        response = await client.chat.completions.create(**create_kwargs)
        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise ValueError("empty response")
        parsed = json.loads(content)
    except Exception as exc:  # noqa: BLE001 - every upstream failure surfaces as one error class
        logger.warning(
            "resume_llm_failed operation=%s model=%s prompt_len=%s latency_ms=%s: %s",
            operation,
            _model(),
            len(user_prompt),
            int((time.perf_counter() - started) * 1000),
            exc,
        )
        raise ExternalServiceError(f"Failed to {operation}. Please try again.") from exc

    if not isinstance(parsed, dict):
        logger.warning("resume_llm_invalid_schema operation=%s type=%s", operation, type(parsed).__name__)
        raise ExternalServiceError(f"Failed to {operation}. Please try again.", code="llm_invalid")

    logger.info(
        "resume_llm_ok operation=%s model=%s latency_ms=%s",
        operation,
        _model(),
        int((time.perf_counter() - started) * 1000),
    )
    return parsed


def _safe_str(value: Any, default: str, max_len: int = 200) -> str:
    if value is None or isinstance(value, (dict, list)):
        return default
    text = str(value).strip()
    return text[:max_len] if text else default


def _safe_str_list(value: Any, max_items: int = 50, max_len: int = 300) -> list[str]:
    if not isinstance(value, list):
        return []
    items: list[str] = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text:
            items.append(text[:max_len])
        if len(items) >= max_items:
            break
    return items


def _clamp_int(value: Any, default: int, min_value: int, max_value: int | None = None) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    if math.isinf(number):
        if number < 0:
            return min_value
        return max_value if max_value is not None else default
    result = int(round(number))
    if max_value is not None:
        result = min(max_value, result)
    return max(min_value, result)


def normalize_resume_analysis(raw: dict[str, Any] | None) -> ResumeAnalysis:
    data = raw if isinstance(raw, dict) else {}
    return ResumeAnalysis(
        experience_level=_safe_str(data.get("experienceLevel"), DEFAULT_EXPERIENCE_LEVEL),
        skill_count=_clamp_int(data.get("skillCount"), 0, 0),
        industry=_safe_str(data.get("industry"), DEFAULT_INDUSTRY),
        key_skills=_safe_str_list(data.get("keySkills")),
    )


def normalize_job_analysis(raw: dict[str, Any] | None) -> JobAnalysis:
    data = raw if isinstance(raw, dict) else {}
    return JobAnalysis(
        required_skills=_safe_str_list(data.get("requiredSkills")),
        experience_level=_safe_str(data.get("experienceLevel"), DEFAULT_EXPERIENCE_LEVEL),
        industry=_safe_str(data.get("industry"), DEFAULT_INDUSTRY),
        key_requirements=_safe_str_list(data.get("keyRequirements")),
    )


def normalize_improvements(raw: Any) -> Improvements:
    data = raw if isinstance(raw, dict) else {}
    return Improvements(
        match_score=_clamp_int(data.get("matchScore"), DEFAULT_MATCH_SCORE, 0, 100),
        keywords_added=_clamp_int(data.get("keywordsAdded"), 0, 0),
        sections_improved=_clamp_int(data.get("sectionsImproved"), 0, 0),
        improvements_list=_safe_str_list(data.get("improvementsList")),
    )


def normalize_optimization(raw: dict[str, Any] | None, *, original_content: str) -> OptimizationResult:
    data = raw if isinstance(raw, dict) else {}
    content = data.get("optimizedContent")
    if not isinstance(content, str) or not content.strip():
        content = original_content
    return OptimizationResult(
        optimized_content=content,
        improvements=normalize_improvements(data.get("improvements")),
    )


async def analyze_resume(resume_text: str, *, timeout_s: float | None = None) -> ResumeAnalysis:
    raw = await _json_completion(
        system_prompt=RESUME_ANALYSIS_PROMPT,
        user_prompt=f"Analyze this resume content and extract key information:\n\n{resume_text}",
        operation="analyze resume",
        timeout_s=timeout_s,
    )
    return normalize_resume_analysis(raw)


async def analyze_job_description(job_text: str, *, timeout_s: float | None = None) -> JobAnalysis:
    raw = await _json_completion(
        system_prompt=JOB_ANALYSIS_PROMPT,
        user_prompt=f"Analyze this job description and extract key requirements:\n\n{job_text}",
        operation="analyze job description",
        timeout_s=timeout_s,
    )
    return normalize_job_analysis(raw)


async def optimize_resume(resume_text: str, job_text: str, *, timeout_s: float | None = None) -> OptimizationResult:
    user_prompt = (
        "Please optimize this resume to better match the job description:\n\n"
        f"RESUME CONTENT:\n{resume_text}\n\n"
        f"JOB DESCRIPTION:\n{job_text}\n\n"
        "Please optimize the resume while maintaining accuracy and professionalism."
    )
    raw = await _json_completion(
        system_prompt=OPTIMIZATION_PROMPT,
        user_prompt=user_prompt,
        operation="optimize resume",
        timeout_s=timeout_s,
        max_output_tokens=4000,
    )
    return normalize_optimization(raw, original_content=resume_text)
