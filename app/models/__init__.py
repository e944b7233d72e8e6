"""
데이터 모델 패키지
"""

from .subtitle import (
    ExtractionMethod,
    Cue,
    CaptionTrack,
    LanguageOption,
    ExtractionResult,
    SubtitlePayload,
    ExtractResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "ExtractionMethod",
    "Cue",
    "CaptionTrack",
    "LanguageOption",
    "ExtractionResult",
    "SubtitlePayload",
    "ExtractResponse",
    "ErrorResponse",
    "HealthResponse",
]
