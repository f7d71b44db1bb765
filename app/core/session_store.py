from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar

from app.schemas.optimizer import (
    Improvements,
    JobAnalysis,
    JobDescriptionRecord,
    OptimizationRecord,
    ResumeRecord,
)

RecordT = TypeVar("RecordT")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Arena(Generic[RecordT]):
    """Append-only id -> record map for one record type.

    Ids start at 1, increase by one per insert and are never reused.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, RecordT] = {}
        self._next_id = 1

    def insert(self, build: Callable[[int], RecordT]) -> RecordT:
        with self._lock:
            record_id = self._next_id
            self._next_id += 1
            record = build(record_id)
            self._records[record_id] = record
            return record

    def replace(self, record_id: int, update: Callable[[RecordT], RecordT]) -> RecordT | None:
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            updated = update(current)
            self._records[record_id] = updated
            return updated

    def get(self, record_id: int) -> RecordT | None:
        with self._lock:
            return self._records.get(record_id)

    def values(self) -> list[RecordT]:
        with self._lock:
            return list(self._records.values())

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class SessionStore:
    def __init__(self) -> None:
        self.resumes: Arena[ResumeRecord] = Arena()
        self.job_descriptions: Arena[JobDescriptionRecord] = Arena()
        self.optimizations: Arena[OptimizationRecord] = Arena()

    def create_resume(self, *, original_filename: str, original_content: str, file_type: str) -> ResumeRecord:
        return self.resumes.insert(
            lambda record_id: ResumeRecord(
                id=record_id,
                original_filename=original_filename,
                original_content=original_content,
                file_type=file_type,
                uploaded_at=_utc_now(),
            )
        )

    def get_resume(self, resume_id: int) -> ResumeRecord | None:
        return self.resumes.get(resume_id)

    def create_job_description(self, *, content: str, analysis: JobAnalysis | None = None) -> JobDescriptionRecord:
        return self.job_descriptions.insert(
            lambda record_id: JobDescriptionRecord(
                id=record_id,
                content=content,
                analysis=analysis,
                created_at=_utc_now(),
            )
        )

    def attach_job_analysis(self, job_description_id: int, analysis: JobAnalysis) -> JobDescriptionRecord | None:
        return self.job_descriptions.replace(
            job_description_id,
            lambda record: record.model_copy(update={"analysis": analysis}),
        )

    def get_job_description(self, job_description_id: int) -> JobDescriptionRecord | None:
        return self.job_descriptions.get(job_description_id)

    def create_optimization(
        self,
        *,
        resume_id: int,
        job_description_id: int,
        optimized_content: str,
        improvements: Improvements,
    ) -> OptimizationRecord:
        return self.optimizations.insert(
            lambda record_id: OptimizationRecord(
                id=record_id,
                resume_id=resume_id,
                job_description_id=job_description_id,
                optimized_content=optimized_content,
                improvements=improvements,
                match_score=improvements.match_score,
                created_at=_utc_now(),
            )
        )

    def get_optimization(self, optimization_id: int) -> OptimizationRecord | None:
        return self.optimizations.get(optimization_id)

    def get_optimizations_by_resume_id(self, resume_id: int) -> list[OptimizationRecord]:
        return [record for record in self.optimizations.values() if record.resume_id == resume_id]

    def clear(self) -> None:
        self.resumes.clear()
        self.job_descriptions.clear()
        self.optimizations.clear()


store = SessionStore()
