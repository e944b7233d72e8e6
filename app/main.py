"""
YouTube Extractor API - FastAPI 메인 애플리케이션
YouTube 영상 ID로 타임코드 자막을 추출하는 API를 제공합니다.
"""

import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional

from config import get_settings
from app.models import (
    ErrorResponse,
    ExtractResponse,
    HealthResponse,
    SubtitlePayload,
)
from app.modules import SubtitleExtractor, SubtitleExtractionError
from app.utils import extract_video_id
from app.utils.logging_config import get_logger, setup_logging


settings = get_settings()
setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="YouTube 자막 추출 API - youtube-transcript-api → yt-dlp 순서로 자동 폴백",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 인스턴스 생성
extractor = SubtitleExtractor()


# ===== 요청 로깅 미들웨어 =====

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    if request.url.path.startswith("/api/"):
        duration = time.time() - start_time
        logger.info(
            "[REQUEST] %s %s videoID=%s → %d (%.2f초)",
            request.method,
            request.url.path,
            request.query_params.get("videoID", "-"),
            response.status_code,
            duration,
        )

    return response


# ===== Health =====

@app.get("/", tags=["Health"])
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "extract": "/api/extract?videoID=VIDEO_ID&lang=LANGUAGE_CODE",
            "health": "/health",
        },
        "parameters": {
            "videoID": "YouTube video ID or URL (required)",
            "lang": 'Language code (optional, e.g., "en", "es", "fr")',
            "method": "Accepted for compatibility and ignored; methods are always tried in order",
        },
        "examples": [
            "/api/extract?videoID=dQw4w9WgXcQ",
            "/api/extract?videoID=dQw4w9WgXcQ&lang=en",
            "/api/extract?videoID=dQw4w9WgXcQ&lang=es",
        ],
        "note": "Automatic fallback chain: youtube-transcript-api → yt-dlp",
    }


@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="OK", message=f"{settings.APP_NAME} is running")


# ===== Subtitles =====

@app.get(
    "/api/extract",
    tags=["Subtitles"],
    response_model=ExtractResponse,
    response_model_exclude_none=True,
)
async def extract_endpoint(
    videoID: Optional[str] = Query(default=None, description="YouTube Video ID 또는 URL"),
    lang: Optional[str] = Query(default=None, description="자막 언어 코드"),
    method: Optional[str] = Query(default=None, description="하위 호환용 (무시됨)"),
):
    """
    YouTube 영상의 자막을 추출합니다.
    youtube-transcript-api가 실패하면 yt-dlp로 다시 시도합니다.
    """
    if not videoID or not videoID.strip():
        return JSONResponse(status_code=400, content={"error": "videoID parameter is required"})

    video_id = extract_video_id(videoID) or videoID.strip()

    # 블로킹 I/O는 스레드풀에서 실행
    result = await run_in_threadpool(extractor.extract, video_id, lang or None)

    return ExtractResponse(
        success=True,
        method=result.method.value,
        data=SubtitlePayload(
            subtitles=result.subtitles,
            language=result.language,
            available_languages=result.available_languages,
        ),
    )


# ===== 예외 핸들러 =====

@app.exception_handler(SubtitleExtractionError)
async def subtitle_extraction_error_handler(request: Request, exc: SubtitleExtractionError):
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=exc.message, note=exc.note).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="Endpoint not found").model_dump(exclude_none=True),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("처리되지 않은 오류: %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Something went wrong!").model_dump(exclude_none=True),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
