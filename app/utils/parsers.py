"""
유틸리티 함수 모듈
YouTube URL 파싱, timedtext 정규화 등 공통 기능을 제공합니다.
"""

import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from app.models.subtitle import Cue


# timedtext XML에서 이중 이스케이프되어 남는 엔티티
_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}
_ENTITY_PATTERN = re.compile("|".join(re.escape(entity) for entity in _ENTITIES))

_ONE_DECIMAL = Decimal("0.1")


def extract_video_id(url_or_id: str) -> Optional[str]:
    """
    YouTube URL 또는 ID에서 Video ID를 추출합니다.
    
    지원 형식:
    - 전체 URL: https://www.youtube.com/watch?v=VIDEO_ID
    - 단축 URL: https://youtu.be/VIDEO_ID
    - 임베드 URL: https://www.youtube.com/embed/VIDEO_ID
    - 순수 ID: VIDEO_ID (11자리 영숫자)
    
    Args:
        url_or_id: YouTube URL 또는 Video ID
        
    Returns:
        추출된 Video ID 또는 None (추출 실패 시)
    """
    if not url_or_id:
        return None
    
    url_or_id = url_or_id.strip()
    
    # 순수 Video ID인 경우
    if re.match(r"^[a-zA-Z0-9_-]{11}$", url_or_id):
        return url_or_id
    
    patterns = [
        r"(?:youtube\.com/watch\?v=)([a-zA-Z0-9_-]{11})",
        r"(?:youtu\.be/)([a-zA-Z0-9_-]{11})",
        r"(?:youtube\.com/embed/)([a-zA-Z0-9_-]{11})",
        r"(?:youtube\.com/shorts/)([a-zA-Z0-9_-]{11})",
        # v 파라미터가 다른 위치에 있는 경우
        r"[?&]v=([a-zA-Z0-9_-]{11})",
    ]
    
    for pattern in patterns:
        match = re.search(pattern, url_or_id)
        if match:
            return match.group(1)
    
    return None


def decode_entities(text: Any) -> str:
    """
    자막 텍스트의 XML 엔티티 5종(&amp; &lt; &gt; &quot; &#39;)을 디코딩합니다.
    
    왼쪽에서 오른쪽으로 한 번만 치환하므로 "&amp;lt;"는 "&lt;"가 되고
    다시 "<"로 디코딩되지 않습니다.
    
    Args:
        text: 원본 텍스트 (None이면 빈 문자열)
        
    Returns:
        디코딩된 문자열
    """
    if text is None:
        return ""
    return _ENTITY_PATTERN.sub(lambda match: _ENTITIES[match.group(0)], str(text))


def format_seconds(value: Any) -> str:
    """
    초 값을 소수점 한 자리 문자열로 변환합니다.
    
    반올림 규칙: 파싱된 float의 최단 십진 표현 기준 ROUND_HALF_UP
    ("1.25" -> "1.3", "0.05" -> "0.1").
    파싱할 수 없거나 음수/NaN/무한대인 값은 "0.0"이 됩니다.
    
    Args:
        value: 문자열 또는 숫자 (None 허용)
        
    Returns:
        "12.3" 형식의 문자열
    """
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return "0.0"
    
    if not math.isfinite(seconds) or seconds <= 0:
        return "0.0"
    
    try:
        rounded = Decimal(repr(seconds)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Decimal 정밀도를 넘는 큰 값
        return f"{seconds:.1f}"
    return f"{rounded:f}"


def normalize_cue(start: Any = None, dur: Any = None, raw_text: Any = None) -> Cue:
    """
    timedtext 요소 하나의 원시 값으로 Cue를 만듭니다.
    누락되거나 잘못된 값은 기본값("0.0", "")으로 대체되며 예외를 던지지 않습니다.
    """
    return Cue(
        start=format_seconds(start),
        duration=format_seconds(dur),
        text=decode_entities(raw_text),
    )
