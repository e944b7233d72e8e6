"""
로깅 설정 모듈
모듈별 이름 있는 로거와 애플리케이션 전체 로깅 설정을 제공합니다.
"""

import logging
import sys


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    이름 있는 로거를 반환합니다.

    Args:
        name: 로거 이름 (보통 __name__)
    """
    return logging.getLogger(name)


def setup_logging(level: int | str = logging.INFO, format_string: str | None = None) -> None:
    """
    애플리케이션 전체 로깅을 설정합니다.

    Args:
        level: 로그 레벨 (숫자 또는 "INFO" 같은 이름)
        format_string: 로그 포맷 문자열
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # 외부 라이브러리 로그 레벨 조정
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
