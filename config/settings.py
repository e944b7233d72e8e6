"""
Subtitle Extractor API 설정 모듈
환경 변수 및 애플리케이션 상수를 관리합니다.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션 설정 클래스
    환경 변수에서 값을 로드하며, 기본값을 제공합니다.
    """
    
    # 애플리케이션 기본 설정
    APP_NAME: str = "YouTube Extractor API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    
    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: list[str] = ["*"]
    
    # 자막 추출 설정
    DEFAULT_LANGUAGE: str = "en"  # 언어 미지정 시 youtube-transcript-api에 전달할 언어
    SUBTITLE_FETCH_TIMEOUT: float = 10.0  # 업스트림 요청 타임아웃 (초)
    
    # 로깅
    LOG_LEVEL: str = "INFO"
    
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache()
def get_settings() -> Settings:
    """
    설정 인스턴스를 반환합니다.
    lru_cache를 사용하여 싱글톤 패턴을 구현합니다.
    """
    return Settings()
