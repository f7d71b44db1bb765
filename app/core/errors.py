from __future__ import annotations

from fastapi import status


class OptimizerError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(OptimizerError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_request"


class UnsupportedMediaTypeError(ValidationError):
    code = "unsupported_media_type"


class EmptyContentError(ValidationError):
    code = "empty_content"


class NotFoundError(OptimizerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ExternalServiceError(OptimizerError):
    code = "llm_unavailable"


class ExtractionError(OptimizerError):
    code = "extraction_failed"

    def __init__(self, message: str, *, filename: str = "", cause: BaseException | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.filename = filename
        self.cause = cause


class LegacyDocumentError(ExtractionError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "legacy_doc_unsupported"


class RenderError(OptimizerError):
    code = "render_failed"
