import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .analysis import ChatClient, analyze_resume
from .config import settings
from .errors import (
    EmptyContent,
    ExtractionFailure,
    MissingField,
    MissingFile,
    PayloadTooLarge,
    ProviderError,
    ResumeOptimizerError,
    Unconfigured,
    UnparseableResponse,
    UnsupportedType,
)
from .openrouter import OpenRouterClient
from .pdf import extract_pdf_text
from .schemas import AnalysisRequest, AnalysisResponse, ApiStatus, ExtractionResult

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
MAX_PDF_BYTES = 5 * 1024 * 1024  # 5 MB
PDF_MEDIA_TYPE = "application/pdf"
RATE_LIMIT_MESSAGE = "Too many requests, please try again later."
ANALYZE_PATH = "/api/analyze"

# --- Rate limiting ---
# Moving window: at most N requests in any trailing period, per client address.
limiter = Limiter(key_func=get_remote_address, strategy="moving-window")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.api_key_configured:
        app.state.llm_client = OpenRouterClient(
            settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            timeout=settings.llm_timeout,
            site_url=settings.site_url,
            app_title=settings.app_title,
        )
    else:
        app.state.llm_client = None
    logger.info("API key configured: %s", "Yes" if settings.api_key_configured else "No")
    logger.info("Model: %s, analyze rate limit: %s", settings.llm_model, settings.rate_limit_per_ip)
    try:
        yield
    finally:
        if app.state.llm_client is not None:
            await app.state.llm_client.aclose()


app = FastAPI(title="Resume Optimizer", lifespan=lifespan)
app.state.limiter = limiter
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_llm_client(request: Request) -> Optional[ChatClient]:
    """The provider client built at startup, or None without an API key."""
    return getattr(request.app.state, "llm_client", None)


def get_pdf_extractor() -> Callable[[bytes], str]:
    return extract_pdf_text


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.info("Rate limit exceeded for %s on %s", get_remote_address(request), request.url.path)
    return JSONResponse({"message": RATE_LIMIT_MESSAGE}, status_code=429)


@app.exception_handler(ResumeOptimizerError)
async def resume_optimizer_error_handler(request: Request, exc: ResumeOptimizerError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    if isinstance(exc, ProviderError):
        logger.log(level, "%s failed: AI provider error: %s", request.url.path, exc.detail)
    else:
        logger.log(level, "%s failed: %s", request.url.path, exc.message)
    if isinstance(exc, UnparseableResponse):
        logger.debug("Unparseable reply starts with: %r", exc.raw[: exc.DEBUG_CHARS])
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # A wrongly typed or unparseable analyze body is a missing field to the caller
    if request.url.path == ANALYZE_PATH:
        return await resume_optimizer_error_handler(request, MissingField())
    return await request_validation_exception_handler(request, exc)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"title": settings.app_title, "max_pdf_mb": MAX_PDF_BYTES // (1024 * 1024)},
    )


@app.get("/api", response_model=ApiStatus)
async def api_status():
    return ApiStatus(message="Resume Optimizer API is running", status="active")


@app.post("/api/extract", response_model=ExtractionResult)
async def extract(
    file: Optional[UploadFile] = File(None),
    extractor: Callable[[bytes], str] = Depends(get_pdf_extractor),
):
    if file is None:
        raise MissingFile()

    if file.content_type != PDF_MEDIA_TYPE:
        raise UnsupportedType()

    # One byte past the limit is enough to know it is too large
    pdf_bytes = await file.read(MAX_PDF_BYTES + 1)
    if len(pdf_bytes) > MAX_PDF_BYTES:
        raise PayloadTooLarge()

    try:
        text = await run_in_threadpool(extractor, pdf_bytes)
    except Exception as exc:
        logger.exception("Error processing PDF %r", file.filename)
        raise ExtractionFailure(str(exc) or None) from exc

    text = (text or "").strip()
    if not text:
        raise EmptyContent()

    return ExtractionResult(text=text)


@app.post(ANALYZE_PATH, response_model=AnalysisResponse)
@limiter.limit(lambda: settings.rate_limit_per_ip, error_message=RATE_LIMIT_MESSAGE)
async def analyze(
    request: Request,
    payload: Optional[AnalysisRequest] = None,
    client: Optional[ChatClient] = Depends(get_llm_client),
):
    # --- Validate inputs ---
    if payload is None or not payload.text.strip() or not payload.job_title.strip():
        raise MissingField()

    if client is None:
        raise Unconfigured()

    # --- Call the model ---
    try:
        return await analyze_resume(
            client,
            payload.text,
            payload.job_title,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
    except ResumeOptimizerError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error during resume analysis")
        raise ProviderError(str(exc) or exc.__class__.__name__) from exc
