"""
자막 추출 모듈
여러 자막 소스를 고정된 우선순위로 시도하여 YouTube 영상의 자막을 추출합니다.

전략:
1. youtube-transcript-api로 시도 → 성공하면 (빈 결과라도) 그대로 반환
2. 실패하면 yt-dlp 메타데이터 + timedtext XML로 시도
3. 둘 다 실패하면 마지막(yt-dlp) 실패 메시지로 SubtitleExtractionError
"""

from typing import Optional, Sequence

from config import get_settings
from app.models.subtitle import ExtractionMethod, ExtractionResult
from app.modules.caption_source import CaptionSource, FetchOutcome
from app.modules.transcript_api import TranscriptApiSource
from app.modules.ytdlp_captions import YtdlpCaptionSource
from app.utils.logging_config import get_logger


logger = get_logger(__name__)

FAILURE_NOTE = "Both extraction methods failed. The video may not have subtitles available."


class SubtitleExtractionError(Exception):
    """
    모든 자막 소스가 실패했을 때의 예외

    메시지는 마지막으로 시도한 소스의 실패 메시지입니다.
    이전 소스의 메시지는 로그에만 남습니다.
    """

    def __init__(self, message: str, method: Optional[ExtractionMethod] = None, note: str = FAILURE_NOTE):
        super().__init__(message)
        self.message = message
        self.method = method
        self.note = note


class SubtitleExtractor:
    """
    YouTube 자막 추출기 클래스

    소스는 주어진 순서대로 한 번씩만 시도하며, 동시에 호출하지 않습니다.
    인스턴스는 요청 간에 변경되는 상태를 갖지 않습니다.
    """

    def __init__(self, sources: Optional[Sequence[CaptionSource]] = None):
        """
        Args:
            sources: 시도할 자막 소스 목록 (기본값: transcript-api → yt-dlp)
        """
        if sources is None:
            settings = get_settings()
            sources = (
                TranscriptApiSource(
                    default_language=settings.DEFAULT_LANGUAGE,
                    timeout=settings.SUBTITLE_FETCH_TIMEOUT,
                ),
                YtdlpCaptionSource(timeout=settings.SUBTITLE_FETCH_TIMEOUT),
            )
        if not sources:
            raise ValueError("최소 하나의 자막 소스가 필요합니다.")
        self.sources = tuple(sources)

    def extract(self, video_id: str, lang: Optional[str] = None) -> ExtractionResult:
        """
        YouTube 영상에서 자막을 추출합니다.

        Args:
            video_id: YouTube Video ID (비어 있으면 안 됨)
            lang: 언어 코드 (선택)

        Returns:
            ExtractionResult 객체

        Raises:
            SubtitleExtractionError: 모든 소스가 실패한 경우
        """
        if not video_id:
            raise ValueError("video_id는 비어 있을 수 없습니다.")

        outcome: Optional[FetchOutcome] = None
        for source in self.sources:
            outcome = source.fetch(video_id, lang)
            if outcome.succeeded:
                captions = outcome.captions
                logger.info(
                    "[SubtitleExtractor] %s 성공: video_id=%s, %d개 큐",
                    outcome.method.value, video_id, len(captions.subtitles),
                )
                return ExtractionResult(
                    method=outcome.method,
                    subtitles=captions.subtitles,
                    language=captions.language,
                    available_languages=captions.available_languages,
                )

            logger.info("[SubtitleExtractor] %s 실패: video_id=%s - %s", outcome.method.value, video_id, outcome.error)

        logger.warning("[SubtitleExtractor] 모든 방식 실패: video_id=%s", video_id)
        raise SubtitleExtractionError(outcome.error, method=outcome.method)

