"""
유틸리티 패키지
"""

from .parsers import (
    extract_video_id,
    decode_entities,
    format_seconds,
    normalize_cue,
)

__all__ = [
    "extract_video_id",
    "decode_entities",
    "format_seconds",
    "normalize_cue",
]
