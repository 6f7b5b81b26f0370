"""
Keto analysis routes.
"""
import json
import time
from functools import lru_cache

from fastapi import APIRouter, Depends, Request

from ketometer.core.auth import verify_client_key
from ketometer.core.config import settings
from ketometer.core.errors import AnalysisError, InvalidRequest
from ketometer.core.limiter import limiter, ANALYSIS_LIMIT, DIAGNOSTICS_LIMIT
from ketometer.core.logger import log_analysis_error, log_error, log_request, log_response, preview
from ketometer.models.analysis import AnalysisFailure, AnalysisSuccess
from ketometer.services.analysis_service import AnalysisService
from ketometer.services.model_invoker import ModelInvoker

router = APIRouter(dependencies=[Depends(verify_client_key)])


@lru_cache
def get_analysis_service() -> AnalysisService:
    """Shared service instance; overridden in tests."""
    return AnalysisService(
        ModelInvoker.from_settings(settings),
        max_image_dimension=settings.MAX_IMAGE_DIMENSION,
    )


async def _read_json(request: Request):
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidRequest("request body must be valid JSON")


@router.post("/ketometer-analysis")
@limiter.limit(ANALYSIS_LIMIT)
async def analyze(request: Request, service: AnalysisService = Depends(get_analysis_service)):
    """
    Analyze a food, dish or menu for keto compatibility.

    Body: {inputType: text|image|menu, content?, imageData?: [{uri, base64, type}]}

    Always answers 200. Clients check the ``success`` flag: failures carry
    ``error`` (message) and ``details`` (error code).
    """
    log_request("/ketometer-analysis")
    started = time.perf_counter()

    try:
        payload = await _read_json(request)
        analysis = await service.analyze(payload)
    except AnalysisError as e:
        log_analysis_error(e)
        log_response("/ketometer-analysis", e.code, (time.perf_counter() - started) * 1000)
        return AnalysisFailure(error=e.message, details=e.code).model_dump()
    except Exception as e:
        log_error("Keto analysis", e)
        return AnalysisFailure(error="Internal server error", details="internal_error").model_dump()

    log_response("/ketometer-analysis", "success", (time.perf_counter() - started) * 1000)
    return AnalysisSuccess(analysis=analysis.model_dump(exclude_none=True)).model_dump()


@router.post("/ketometer-analysis-test")
@limiter.limit(DIAGNOSTICS_LIMIT)
async def analyze_test(request: Request):
    """
    Connectivity check for the mobile client.

    Echoes the request and reports whether the OpenAI key is configured.
    Never calls the model.
    """
    log_request("/ketometer-analysis-test")

    try:
        body = await _read_json(request)
    except InvalidRequest as e:
        return AnalysisFailure(error=e.message, details=e.code).model_dump()

    body = body if isinstance(body, dict) else {}
    content = body.get("content")
    return {
        "success": True,
        "message": "Test function working",
        "hasOpenAIKey": bool(settings.OPENAI_API_KEY),
        "inputType": body.get("inputType"),
        "content": preview(content) if isinstance(content, str) else None,
    }
