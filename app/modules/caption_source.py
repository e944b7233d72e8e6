"""
자막 소스 공통 인터페이스

각 추출 방식(youtube-transcript-api, yt-dlp)은 CaptionSource를 구현합니다.
업스트림 응답 형태의 차이는 각 구현 내부에서 Cue 리스트로 정규화되며,
fetch()는 예외 대신 FetchOutcome(성공/실패) 값을 반환합니다.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.models.subtitle import Cue, ExtractionMethod, LanguageOption
from app.utils.logging_config import get_logger


logger = get_logger(__name__)


class CaptionSourceError(Exception):
    """자막 소스 하나가 결과를 만들지 못했을 때의 예외"""
    pass


@dataclass(frozen=True)
class SourceCaptions:
    """소스 구현이 반환하는 정규화된 자막"""
    subtitles: list[Cue]
    language: Optional[str] = None
    available_languages: Optional[list[LanguageOption]] = None


@dataclass(frozen=True)
class FetchOutcome:
    """
    자막 소스 한 번 시도의 결과

    captions가 있으면 성공, error가 있으면 실패입니다.
    """
    method: ExtractionMethod
    captions: Optional[SourceCaptions] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.captions is not None

    @classmethod
    def success(cls, method: ExtractionMethod, captions: SourceCaptions) -> "FetchOutcome":
        return cls(method=method, captions=captions)

    @classmethod
    def failure(cls, method: ExtractionMethod, error: str) -> "FetchOutcome":
        return cls(method=method, error=error)


class CaptionSource(ABC):
    """자막 소스 기본 클래스"""

    method: ExtractionMethod

    def fetch(self, video_id: str, lang: Optional[str] = None) -> FetchOutcome:
        """
        자막을 가져옵니다. 예외를 던지지 않고 FetchOutcome을 반환합니다.

        실패 메시지에는 방식 이름이 붙습니다
        (예: "yt-dlp extraction failed: no captions available").

        Args:
            video_id: YouTube Video ID
            lang: 언어 코드 (없으면 소스별 기본 동작)
        """
        try:
            captions = self._fetch(video_id, lang)
        except CaptionSourceError as e:
            return FetchOutcome.failure(self.method, f"{self.method.value} extraction failed: {e}")
        except Exception as e:
            # 라이브러리 내부 예외도 이 소스의 실패로 취급
            logger.debug("%s 예상하지 못한 오류", self.method.value, exc_info=True)
            return FetchOutcome.failure(self.method, f"{self.method.value} extraction failed: {e}")

        return FetchOutcome.success(self.method, captions)

    @abstractmethod
    def _fetch(self, video_id: str, lang: Optional[str]) -> SourceCaptions:
        """
        실제 추출 로직. 실패 시 CaptionSourceError를 던집니다.
        """
        ...
