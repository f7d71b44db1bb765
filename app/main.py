import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.api.v1.health import router as health_router
from app.api.v1.optimizer import router as optimizer_router
from app.core.config import settings
from app.core.errors import OptimizerError
from app.core.rate_limit import limiter
from dotenv import load_dotenv

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
logger = logging.getLogger(__name__)
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Optimizer API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=(settings.cors_allow_origin_regex or "").strip() or None,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(OptimizerError)
async def optimizer_error_handler(request: Request, exc: OptimizerError):
    if exc.status_code >= 500:
        logger.warning("request_failed path=%s code=%s: %s", request.url.path, exc.code, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg") or "Invalid request"
    detail = f"{location}: {message}" if location else message
    return JSONResponse(status_code=400, content={"error": detail})


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(optimizer_router, prefix="/v1", tags=["Optimizer"])
