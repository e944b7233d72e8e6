"""
모듈 패키지
핵심 비즈니스 로직을 포함합니다.
"""

from .caption_source import (
    CaptionSource,
    CaptionSourceError,
    FetchOutcome,
    SourceCaptions,
)

from .transcript_api import (
    TranscriptApiSource,
    TranscriptApiError,
)

from .ytdlp_captions import (
    YtdlpCaptionSource,
    YtdlpCaptionError,
    collect_caption_tracks,
    select_track,
    parse_timedtext,
)

from .subtitle_extractor import (
    SubtitleExtractor,
    SubtitleExtractionError,
)

__all__ = [
    # 자막 소스
    "CaptionSource",
    "CaptionSourceError",
    "FetchOutcome",
    "SourceCaptions",
    "TranscriptApiSource",
    "TranscriptApiError",
    "YtdlpCaptionSource",
    "YtdlpCaptionError",
    "collect_caption_tracks",
    "select_track",
    "parse_timedtext",
    # 자막 추출
    "SubtitleExtractor",
    "SubtitleExtractionError",
]
