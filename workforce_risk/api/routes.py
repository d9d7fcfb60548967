"""
API routes for Workforce Risk.

Endpoints:
- POST /assess - Run an employment risk assessment
- POST /chat - Answer a follow-up question about an assessment
- GET /health - Health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from workforce_risk import __version__
from workforce_risk.api.schemas import (
    AssessRequest,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
)
from workforce_risk.clients.llm_client import get_llm_client
from workforce_risk.clients.workforce_client import get_workforce_client, reset_workforce_client
from workforce_risk.config.settings import get_settings
from workforce_risk.exceptions import AssessmentError
from workforce_risk.middleware.request_logging import RequestLoggingMiddleware
from workforce_risk.models.assessment import AssessmentResult
from workforce_risk.services.assessment import AssessmentService
from workforce_risk.services.chat import ChatService
from workforce_risk.services.narrative import NarrativeGenerator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["workforce-risk"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# =============================================================================
# Dependencies
# =============================================================================

def get_assessment_service() -> AssessmentService:
    settings = get_settings()
    return AssessmentService(
        workforce=get_workforce_client(),
        narrative_generator=NarrativeGenerator(get_llm_client(), settings),
        settings=settings,
    )


def get_chat_service() -> ChatService:
    return ChatService(
        workforce=get_workforce_client(),
        llm_client=get_llm_client(),
        settings=get_settings(),
    )


# =============================================================================
# Routes
# =============================================================================

@router.post("/assess", responses=ERROR_RESPONSES)
async def assess(
    request: AssessRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> JSONResponse:
    """
    Run an employment risk assessment.

    Resolves the person by profile URL or name (+ company), then returns
    scores, company summary, salary estimate, hiring signals and narrative.
    """
    result: AssessmentResult = await service.assess(request)
    return JSONResponse(content=result.to_wire())


@router.post("/chat", response_model=ChatResponse, responses=ERROR_RESPONSES)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Answer a follow-up question, querying live workforce data as needed."""
    answer = await service.answer(request)
    return ChatResponse(answer=answer)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Lightweight health check endpoint."""
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))


# =============================================================================
# Exception handlers
# =============================================================================

async def assessment_error_handler(request: Request, exc: AssessmentError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location} {first.get('msg', '')}".strip() if first else "Invalid request"
    logger.warning(f"{request.method} {request.url.path} -> 400: {message}")
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await reset_workforce_client()


def create_app() -> FastAPI:
    """
    Create FastAPI application.

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Workforce Risk API",
        description="Employment risk assessments and follow-up chat over live workforce data",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(AssessmentError, assessment_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)

    return app
