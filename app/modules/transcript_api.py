"""
youtube-transcript-api 기반 자막 소스 (1순위)

라이브러리가 이미 파싱/디코딩한 스니펫을 Cue로 변환합니다.
시간 값만 소수점 한 자리 문자열로 맞추고 텍스트는 그대로 사용합니다.
"""

from typing import Optional

import requests
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from app.models.subtitle import Cue, ExtractionMethod
from app.modules.caption_source import CaptionSource, CaptionSourceError, SourceCaptions
from app.utils.logging_config import get_logger
from app.utils.parsers import format_seconds


logger = get_logger(__name__)


class TranscriptApiError(CaptionSourceError):
    """youtube-transcript-api 추출 실패"""
    pass


class TimeoutSession(requests.Session):
    """모든 요청에 기본 타임아웃을 적용하는 세션"""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, **kwargs)


class TranscriptApiSource(CaptionSource):
    """
    youtube-transcript-api 자막 소스

    lang이 없으면 default_language로 요청합니다.
    """

    method = ExtractionMethod.TRANSCRIPT_API

    def __init__(self, default_language: str = "en", timeout: float = 10.0):
        self.default_language = default_language
        self.timeout = timeout

    def _fetch(self, video_id: str, lang: Optional[str]) -> SourceCaptions:
        language = lang or self.default_language
        logger.debug("[transcript-api] 요청: video_id=%s, lang=%s", video_id, language)

        with TimeoutSession(self.timeout) as session:
            api = YouTubeTranscriptApi(http_client=session)
            try:
                fetched = api.fetch(video_id, languages=[language])
            except CouldNotRetrieveTranscript as e:
                raise TranscriptApiError(str(e)) from e
            except requests.RequestException as e:
                raise TranscriptApiError(f"network error: {e}") from e

            subtitles = [
                Cue(
                    start=format_seconds(snippet.start),
                    duration=format_seconds(snippet.duration),
                    text=snippet.text or "",
                )
                for snippet in fetched
            ]

        logger.debug("[transcript-api] 완료: %d개 큐", len(subtitles))
        return SourceCaptions(subtitles=subtitles)
