"""
yt-dlp 기반 자막 소스 (2순위)

1. yt-dlp로 영상 메타데이터를 가져와 자막 트랙 목록을 만듭니다.
2. 요청 언어와 정확히 일치하는 트랙, 없으면 첫 번째 트랙을 선택합니다.
3. 선택한 트랙의 timedtext XML(srv1)을 httpx로 다운로드합니다.
4. <transcript><text start=".." dur="..">..</text></transcript>를 Cue 리스트로 파싱합니다.
"""

import xml.etree.ElementTree as ET
from typing import Optional, Union
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

import httpx
import yt_dlp

from app.models.subtitle import CaptionTrack, Cue, ExtractionMethod, LanguageOption
from app.modules.caption_source import CaptionSource, CaptionSourceError, SourceCaptions
from app.utils.logging_config import get_logger
from app.utils.parsers import normalize_cue


logger = get_logger(__name__)

# <transcript><text start dur> 형식의 timedtext 포맷
TIMEDTEXT_FORMAT = "srv1"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# timedtext 문서 최대 크기 (바이트)
MAX_TIMEDTEXT_BYTES = 5 * 1024 * 1024


class YtdlpCaptionError(CaptionSourceError):
    """yt-dlp 경로 추출 실패"""
    pass


def _with_format(url: str, fmt: str) -> str:
    """timedtext URL의 fmt 파라미터를 교체합니다."""
    parts = urlsplit(url)
    query = parse_qs(parts.query, keep_blank_values=True)
    query["fmt"] = [fmt]
    return urlunsplit(parts._replace(query=urlencode(query, doseq=True)))


def _is_translation(url: str) -> bool:
    """자동 번역 트랙(tlang 파라미터)인지 확인합니다."""
    return "tlang" in parse_qs(urlsplit(url).query)


def _build_track(language_code: str, formats: list[dict]) -> Optional[CaptionTrack]:
    """yt-dlp 자막 포맷 목록에서 트랙 디스크립터를 만듭니다."""
    url = next(
        (f["url"] for f in formats if f.get("ext") == TIMEDTEXT_FORMAT and f.get("url")),
        None,
    )
    if url is None:
        base_url = next((f["url"] for f in formats if f.get("url")), None)
        if base_url is None:
            return None
        url = _with_format(base_url, TIMEDTEXT_FORMAT)

    display_name = next((f["name"] for f in formats if f.get("name")), None)

    return CaptionTrack(
        language_code=language_code,
        display_name=display_name,
        source_url=url,
    )


def collect_caption_tracks(info: dict) -> list[CaptionTrack]:
    """
    yt-dlp 메타데이터에서 자막 트랙 목록을 추출합니다.

    수동 자막을 먼저, 그 다음 원본 언어 자동 자막을 yt-dlp가 반환한 순서대로 담습니다.
    자동 번역 트랙과 라이브 채팅은 제외합니다.
    """
    tracks: list[CaptionTrack] = []

    for language_code, formats in (info.get("subtitles") or {}).items():
        if language_code == "live_chat":
            continue
        track = _build_track(language_code, formats or [])
        if track:
            tracks.append(track)

    # yt-dlp는 원본 자동 자막을 "<lang>-orig"와 "<lang>" 두 키로 모두 반환
    auto_codes: set[str] = set()
    for language_code, formats in (info.get("automatic_captions") or {}).items():
        track = _build_track(language_code.removesuffix("-orig"), formats or [])
        if track and not _is_translation(track.source_url) and track.language_code not in auto_codes:
            auto_codes.add(track.language_code)
            tracks.append(track)

    return tracks


def select_track(tracks: list[CaptionTrack], lang: Optional[str] = None) -> CaptionTrack:
    """
    언어 코드가 정확히 일치하는 트랙을, 없으면 첫 번째 트랙을 반환합니다.
    """
    if lang:
        for track in tracks:
            if track.language_code == lang:
                return track
    return tracks[0]


def parse_timedtext(document: Union[str, bytes]) -> list[Cue]:
    """
    timedtext XML 문서를 Cue 리스트로 파싱합니다.

    문서 수준의 XML 오류만 예외가 되고, 개별 <text> 요소의 누락된 값은 기본값으로 채웁니다.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise YtdlpCaptionError(f"caption parse failed: {e}") from e

    if root.tag != "transcript":
        return []

    return [
        normalize_cue(element.get("start"), element.get("dur"), "".join(element.itertext()))
        for element in root.findall("text")
    ]


class YtdlpCaptionSource(CaptionSource):
    """
    yt-dlp 메타데이터 + timedtext XML 자막 소스

    Args:
        timeout: 메타데이터 조회와 다운로드에 적용할 타임아웃 (초)
        http_client: 다운로드에 사용할 httpx.Client (없으면 요청마다 생성)
        max_document_bytes: 파싱을 허용할 timedtext 문서 최대 크기
    """

    method = ExtractionMethod.YTDLP

    def __init__(
        self,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
        max_document_bytes: int = MAX_TIMEDTEXT_BYTES,
    ):
        self.timeout = timeout
        self._http_client = http_client
        self.max_document_bytes = max_document_bytes

    def _fetch(self, video_id: str, lang: Optional[str]) -> SourceCaptions:
        info = self._load_video_info(video_id)

        tracks = collect_caption_tracks(info)
        if not tracks:
            raise YtdlpCaptionError("no captions available")

        track = select_track(tracks, lang)
        logger.debug(
            "[yt-dlp] 트랙 선택: %s (요청=%s, 사용 가능=%s)",
            track.language_code, lang, [t.language_code for t in tracks],
        )

        subtitles = parse_timedtext(self._download(track.source_url))
        logger.debug("[yt-dlp] 완료: %d개 큐", len(subtitles))

        return SourceCaptions(
            subtitles=subtitles,
            language=track.language_code,
            available_languages=[
                LanguageOption(code=t.language_code, name=t.name) for t in tracks
            ],
        )

    def _load_video_info(self, video_id: str) -> dict:
        """yt-dlp로 영상 메타데이터를 가져옵니다."""
        url = f"https://www.youtube.com/watch?v={video_id}"
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "ignore_no_formats_error": True,
            "socket_timeout": self.timeout,
        }

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            raise YtdlpCaptionError(f"metadata fetch failed: {e}") from e

        if not info:
            raise YtdlpCaptionError("metadata fetch failed: empty response")
        return info

    def _download(self, url: str) -> bytes:
        """timedtext 문서를 다운로드합니다."""
        client = self._http_client or httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )
        try:
            response = client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise YtdlpCaptionError(f"caption download failed: {e}") from e
        finally:
            if client is not self._http_client:
                client.close()

        if len(response.content) > self.max_document_bytes:
            raise YtdlpCaptionError(
                f"caption download failed: document exceeds {self.max_document_bytes} bytes"
            )
        return response.content
