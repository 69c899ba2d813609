"""
Health check 엔드포인트. Kubernetes liveness/readiness probe용.
매 요청마다 새로 판정(결과 캐시 없음).
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from app.core.database import ping_db
from app.schemas.health import LivenessResponse, ReadinessResponse

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    """UTC ISO-8601, 밀리초, Z 접미사. 예: 2026-01-01T00:00:00.000Z"""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error_message(exc: BaseException) -> str:
    return str(exc) or "Unknown error"


@router.get("/live", response_model=LivenessResponse)
async def get_live() -> LivenessResponse:
    """프로세스 생존 여부. 어떤 의존성도 확인하지 않으므로 항상 200."""
    return LivenessResponse(timestamp=_timestamp())


@router.head("/live")
async def head_live() -> Response:
    return Response(status_code=200)


@router.get("/ready", response_model=ReadinessResponse)
async def get_ready() -> JSONResponse:
    """DB SELECT 1 성공 시 200 ready, 실패 시 503 not_ready + error."""
    try:
        await ping_db()
    except Exception as e:
        # 일시적 degraded 신호. 오류 로그로 올리지 않음.
        logger.warning("Readiness check failed: %s", e)
        body = ReadinessResponse(
            status="not_ready",
            timestamp=_timestamp(),
            database="disconnected",
            error=_error_message(e),
        )
        return JSONResponse(status_code=503, content=body.model_dump())
    body = ReadinessResponse(status="ready", timestamp=_timestamp(), database="connected")
    return JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))


@router.head("/ready")
async def head_ready() -> Response:
    try:
        await ping_db()
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return Response(status_code=503)
    return Response(status_code=200)
