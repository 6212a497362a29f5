from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, Depends, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from matching import (
    AnswerValidationError,
    Career,
    Catalog,
    CatalogError,
    TOP_MATCHES_LIMIT,
    load_catalog,
    match_careers,
    top_matches,
    validate_answers,
)
from models import (
    Assessment,
    CareerInsight,
    CareerInsightRequest,
    CareerMetrics,
    CareerReport,
    MatchRequest,
    MatchResponse,
    PlatformMetrics,
    ReportRequest,
    SaveAssessmentRequest,
    SaveAssessmentResponse,
    Settings,
    SuccessResponse,
    TrackEventRequest,
)
from insights import InsightsError, fetch_career_metrics, fetch_realtime_careers, generate_career_insights
from reports import build_career_report
from storage import StorageError, get_storage

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(title="Career Discovery API", version=API_VERSION)

# In-memory stores
LAST_REQUESTS_BY_IP: Dict[str, List[float]] = {}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def get_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        model_name=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        llm_max_retries=int(os.getenv("LLM_MAX_RETRIES", "3")),
        insights_cache_ttl_seconds=int(os.getenv("INSIGHTS_CACHE_TTL_SECONDS", "3600")),
        rate_limit_requests_per_minute=int(os.getenv("RATE_LIMIT_RPM", "60")),
        strict_answer_validation=_env_flag("STRICT_ANSWER_VALIDATION"),
        catalog_path=os.getenv("CATALOG_PATH") or None,
        storage_backend=os.getenv("STORAGE_BACKEND", "auto"),
        cors_origins=os.getenv("CORS_ORIGINS", "*"),
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list(),
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_catalog(settings: Settings = Depends(get_settings)) -> Catalog:
    return load_catalog(settings.catalog_path)


def get_store(settings: Settings = Depends(get_settings)):
    return get_storage(settings.storage_backend)


async def rate_limit(request: Request, settings: Settings = Depends(get_settings)):
    ip = request.client.host if request.client else "unknown"
    window = 60.0
    max_req = settings.rate_limit_requests_per_minute
    now = time.time()
    bucket = LAST_REQUESTS_BY_IP.setdefault(ip, [])
    # prune
    while bucket and now - bucket[0] > window:
        bucket.pop(0)
    if len(bucket) >= max_req:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.info(f"Rejected {request.method} {request.url.path}: {len(details)} validation error(s)")
    return JSONResponse(status_code=400, content={"error": "Invalid request data", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    logger.error(f"Catalog unavailable: {exc}")
    return JSONResponse(status_code=500, content={"error": "Career catalog unavailable"})


@app.get("/")
@app.get("/health")
async def root(catalog: Catalog = Depends(get_catalog)):
    return {
        "status": "ok",
        "service": "career-discovery-api",
        "version": API_VERSION,
        "catalogVersion": catalog.version,
    }


# Matching

@app.post("/api/match", response_model=MatchResponse, dependencies=[Depends(rate_limit)])
async def match(
    request: MatchRequest,
    catalog: Catalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """
    Rank catalog careers against quiz answers.

    Request Body:
        answers: [{questionId, selectedOption, value}, ...]

    Returns:
        The top 5 matches with their score breakdowns
    """
    if settings.strict_answer_validation:
        try:
            validate_answers(request.answers, catalog)
        except AnswerValidationError as e:
            return JSONResponse(status_code=400, content={"error": "Invalid answers", "details": e.problems})

    results = match_careers(request.answers, catalog)
    return MatchResponse(top_matches=top_matches(results, TOP_MATCHES_LIMIT))


@app.get("/api/catalog", response_model=Catalog)
async def get_catalog_endpoint(catalog: Catalog = Depends(get_catalog)):
    """Quiz questions and careers, as used by the matcher."""
    return catalog


# Assessments

@app.post("/api/save-assessment", response_model=SaveAssessmentResponse)
async def save_assessment(request: SaveAssessmentRequest, store=Depends(get_store)):
    try:
        assessment = await asyncio.to_thread(
            store.create_assessment,
            request.user_id,
            [answer.model_dump(by_alias=True) for answer in request.answers],
            request.top_career,
            request.match_score,
        )
    except StorageError as e:
        logger.error(f"Error in /api/save-assessment: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save assessment")

    return SaveAssessmentResponse(assessment_id=assessment["id"])


@app.get("/api/user-assessment", response_model=Assessment)
async def get_user_assessment(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    store=Depends(get_store),
):
    """Latest assessment of a user."""
    if not user_id:
        raise HTTPException(status_code=400, detail="Missing userId parameter")

    try:
        assessments = await asyncio.to_thread(store.get_assessments_by_user_id, user_id)
    except StorageError as e:
        logger.error(f"Error in /api/user-assessment: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch assessment")

    if not assessments:
        raise HTTPException(status_code=404, detail="No assessment found")
    return Assessment.model_validate(assessments[0])


# Tracking

@app.post("/api/track-career-exploration", response_model=SuccessResponse)
async def track_career_exploration(request: TrackEventRequest, store=Depends(get_store)):
    try:
        await asyncio.to_thread(store.track_career_exploration, request.user_id, request.career_title)
    except StorageError as e:
        # Tracking is best-effort
        logger.warning(f"Career exploration not recorded: {e}")
    return SuccessResponse()


@app.post("/api/track-ar-preview", response_model=SuccessResponse)
async def track_ar_preview(request: TrackEventRequest, store=Depends(get_store)):
    try:
        await asyncio.to_thread(store.track_ar_preview, request.user_id, request.career_title)
    except StorageError as e:
        logger.warning(f"AR preview not recorded: {e}")
    return SuccessResponse()


@app.get("/api/platform-metrics", response_model=PlatformMetrics)
async def platform_metrics(store=Depends(get_store)):
    try:
        metrics = await asyncio.to_thread(store.get_platform_metrics)
    except StorageError as e:
        logger.error(f"Error in /api/platform-metrics: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch metrics")
    return PlatformMetrics(**metrics)


# Enrichment

@app.get("/api/careers-realtime", response_model=List[Career], dependencies=[Depends(rate_limit)])
async def careers_realtime(
    catalog: Catalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """Trending careers from the LLM, or the static catalog when that fails."""
    try:
        careers = await asyncio.to_thread(
            fetch_realtime_careers,
            settings.model_name,
            settings.openai_api_key,
            settings.llm_max_retries,
            settings.insights_cache_ttl_seconds,
        )
    except InsightsError as e:
        logger.warning(f"Serving static careers: {e}")
        return catalog.careers

    return careers or catalog.careers


@app.get("/api/career-metrics/{career_name}", response_model=CareerMetrics, dependencies=[Depends(rate_limit)])
async def career_metrics(career_name: str, settings: Settings = Depends(get_settings)):
    try:
        return await asyncio.to_thread(
            fetch_career_metrics,
            career_name,
            settings.model_name,
            settings.openai_api_key,
            settings.llm_max_retries,
            settings.insights_cache_ttl_seconds,
        )
    except InsightsError as e:
        logger.error(f"Error in /api/career-metrics: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch career metrics")


@app.post("/api/career-insights", response_model=CareerInsight, dependencies=[Depends(rate_limit)])
async def career_insights(request: CareerInsightRequest, settings: Settings = Depends(get_settings)):
    return await asyncio.to_thread(
        generate_career_insights,
        request.career_title,
        request.match_score,
        request.growth_potential,
        request.stress_index,
        request.salary_range.model_dump(),
        settings.model_name,
        settings.openai_api_key,
    )


# Reports

@app.post("/api/report", response_model=CareerReport)
async def report(request: ReportRequest):
    """Content of the downloadable career report (rendered to PDF client-side)."""
    return build_career_report(request.match_result, request.user_name)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
