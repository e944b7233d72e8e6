"""
자막 데이터 모델
Pydantic을 사용하여 자막 데이터 구조를 정의합니다.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum


class ExtractionMethod(str, Enum):
    """자막 추출 방식 열거형 (시도 순서대로)"""
    TRANSCRIPT_API = "youtube-transcript-api"  # 1순위: youtube-transcript-api
    YTDLP = "yt-dlp"                           # 2순위: yt-dlp 메타데이터 + timedtext XML


class Cue(BaseModel):
    """
    개별 자막 큐 모델
    start/dur은 소수점 한 자리 문자열입니다 (예: "1.3").
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)
    
    start: str = Field(default="0.0", description="시작 시간 (초, 소수점 한 자리)")
    duration: str = Field(default="0.0", alias="dur", description="표시 시간 (초, 소수점 한 자리)")
    text: str = Field(default="", description="엔티티가 디코딩된 자막 텍스트")


class CaptionTrack(BaseModel):
    """
    자막 트랙 디스크립터
    yt-dlp 메타데이터에서 생성되며, 트랙 선택과 다운로드에만 사용됩니다.
    """
    model_config = ConfigDict(frozen=True)
    
    language_code: str = Field(..., description="언어 코드 (예: en, ko)")
    display_name: Optional[str] = Field(default=None, description="표시 이름 (예: English)")
    source_url: str = Field(..., description="timedtext XML 다운로드 URL")
    
    @property
    def name(self) -> str:
        """표시 이름이 없으면 언어 코드를 사용합니다."""
        return self.display_name or self.language_code


class LanguageOption(BaseModel):
    """사용 가능한 자막 언어"""
    model_config = ConfigDict(frozen=True)
    
    code: str
    name: str


class ExtractionResult(BaseModel):
    """
    자막 추출 결과
    available_languages는 yt-dlp 경로에서만 채워집니다.
    """
    model_config = ConfigDict(frozen=True)
    
    method: ExtractionMethod
    subtitles: list[Cue] = Field(default_factory=list)
    language: Optional[str] = None
    available_languages: Optional[list[LanguageOption]] = None


# ===== API 응답 모델 =====

class SubtitlePayload(BaseModel):
    """/api/extract 응답의 data 필드"""
    model_config = ConfigDict(populate_by_name=True)
    
    subtitles: list[Cue] = Field(default_factory=list)
    language: Optional[str] = None
    available_languages: Optional[list[LanguageOption]] = Field(
        default=None, alias="availableLanguages"
    )


class ExtractResponse(BaseModel):
    """자막 추출 성공 응답"""
    success: bool = True
    method: str
    data: SubtitlePayload


class ErrorResponse(BaseModel):
    """오류 응답"""
    success: bool = False
    error: str
    note: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
