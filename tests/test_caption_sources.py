"""
자막 소스 테스트
youtube-transcript-api / yt-dlp 소스의 정규화와 실패 처리를 테스트합니다.
"""

import pytest
import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import requests
import yt_dlp

from app.models.subtitle import CaptionTrack, ExtractionMethod
from app.modules import transcript_api, ytdlp_captions
from app.modules.transcript_api import TimeoutSession, TranscriptApiSource
from app.modules.ytdlp_captions import (
    YtdlpCaptionError,
    YtdlpCaptionSource,
    collect_caption_tracks,
    parse_timedtext,
    select_track,
)


TIMEDTEXT_XML = b"""<?xml version="1.0" encoding="utf-8" ?>
<transcript>
<text start="0.5" dur="2.25">Hello &amp;amp; welcome</text>
<text start="3" dur="1.04">it&amp;#39;s &amp;quot;fine&amp;quot;</text>
<text dur="abc"/>
</transcript>
"""

SRV1_EN = "https://www.youtube.com/api/timedtext?v=abc&lang=en&fmt=srv1"
SRV1_KO = "https://www.youtube.com/api/timedtext?v=abc&lang=ko&fmt=srv1"


def make_info():
    return {
        "subtitles": {
            "en": [
                {"ext": "json3", "url": "https://www.youtube.com/api/timedtext?v=abc&lang=en&fmt=json3", "name": "English"},
                {"ext": "srv1", "url": SRV1_EN, "name": "English"},
            ],
            "ko": [
                {"ext": "vtt", "url": "https://www.youtube.com/api/timedtext?v=abc&lang=ko&fmt=vtt"},
            ],
            "live_chat": [{"ext": "json", "url": "https://example.com/chat"}],
        },
        "automatic_captions": {
            "fr-orig": [
                {"ext": "srv1", "url": "https://www.youtube.com/api/timedtext?v=abc&lang=fr&kind=asr&fmt=srv1", "name": "French (auto)"},
            ],
            "de": [
                {"ext": "srv1", "url": "https://www.youtube.com/api/timedtext?v=abc&lang=fr&kind=asr&tlang=de&fmt=srv1", "name": "German"},
            ],
        },
    }


class TestCollectCaptionTracks:
    """collect_caption_tracks 함수 테스트"""

    def test_manual_then_original_auto(self):
        tracks = collect_caption_tracks(make_info())

        assert [t.language_code for t in tracks] == ["en", "ko", "fr"]

    def test_prefers_srv1_url(self):
        tracks = collect_caption_tracks(make_info())

        assert tracks[0].source_url == SRV1_EN

    def test_rewrites_format_when_srv1_missing(self):
        tracks = collect_caption_tracks(make_info())

        assert "fmt=srv1" in tracks[1].source_url
        assert "fmt=vtt" not in tracks[1].source_url

    def test_name_falls_back_to_code(self):
        tracks = collect_caption_tracks(make_info())

        assert tracks[0].name == "English"
        assert tracks[1].display_name is None
        assert tracks[1].name == "ko"

    def test_orig_and_plain_auto_keys_collapse(self):
        """원본 자동 자막이 "-orig"와 일반 키로 중복 반환되어도 한 번만 포함"""
        asr_url = "https://www.youtube.com/api/timedtext?v=abc&lang=en&kind=asr&fmt=srv1"
        info = {
            "automatic_captions": {
                "en-orig": [{"ext": "srv1", "url": asr_url, "name": "English (Original)"}],
                "en": [{"ext": "srv1", "url": asr_url, "name": "English"}],
                "fr": [{"ext": "srv1", "url": asr_url + "&tlang=fr", "name": "French"}],
            },
        }

        tracks = collect_caption_tracks(info)

        assert [t.language_code for t in tracks] == ["en"]
        assert tracks[0].name == "English (Original)"

    def test_manual_and_auto_same_language_both_kept(self):
        info = make_info()
        info["automatic_captions"]["en-orig"] = [
            {"ext": "srv1", "url": "https://www.youtube.com/api/timedtext?v=abc&lang=en&kind=asr&fmt=srv1"},
        ]

        codes = [t.language_code for t in collect_caption_tracks(info)]

        assert codes == ["en", "ko", "fr", "en"]

    def test_empty_info(self):
        assert collect_caption_tracks({}) == []
        assert collect_caption_tracks({"subtitles": None, "automatic_captions": {}}) == []


class TestSelectTrack:
    """select_track 함수 테스트"""

    tracks = [
        CaptionTrack(language_code="en", source_url=SRV1_EN),
        CaptionTrack(language_code="ko", source_url=SRV1_KO),
    ]

    def test_exact_match(self):
        assert select_track(self.tracks, "ko").language_code == "ko"

    def test_no_match_uses_first(self):
        assert select_track(self.tracks, "es").language_code == "en"

    def test_no_lang_uses_first(self):
        assert select_track(self.tracks).language_code == "en"
        assert select_track(self.tracks, "").language_code == "en"


class TestParseTimedtext:
    """parse_timedtext 함수 테스트"""

    def test_document_order_and_decoding(self):
        cues = parse_timedtext(TIMEDTEXT_XML)

        assert len(cues) == 3
        assert (cues[0].start, cues[0].duration, cues[0].text) == ("0.5", "2.3", "Hello & welcome")
        assert (cues[1].start, cues[1].duration, cues[1].text) == ("3.0", "1.0", 'it\'s "fine"')

    def test_element_defaults(self):
        """self-closing 요소와 잘못된 값은 기본값"""
        cue = parse_timedtext(TIMEDTEXT_XML)[2]

        assert (cue.start, cue.duration, cue.text) == ("0.0", "0.0", "")

    def test_nested_markup_text(self):
        cues = parse_timedtext('<transcript><text start="1" dur="1">a <font>b</font> c</text></transcript>')

        assert cues[0].text == "a b c"

    def test_malformed_document(self):
        with pytest.raises(YtdlpCaptionError, match="caption parse failed"):
            parse_timedtext(b"<transcript><text>")

    def test_empty_document(self):
        with pytest.raises(YtdlpCaptionError):
            parse_timedtext(b"")

    def test_other_root(self):
        assert parse_timedtext("<timedtext><body/></timedtext>") == []


class FakeYoutubeDL:
    """yt_dlp.YoutubeDL 대체"""

    info = None
    error = None

    def __init__(self, opts):
        self.opts = opts

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def extract_info(self, url, download=False):
        if self.error:
            raise self.error
        return self.info


def make_source(handler) -> YtdlpCaptionSource:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return YtdlpCaptionSource(timeout=5, http_client=client)


class TestYtdlpCaptionSource:
    """YtdlpCaptionSource 테스트"""

    @pytest.fixture(autouse=True)
    def fake_ytdl(self, monkeypatch):
        FakeYoutubeDL.info = make_info()
        FakeYoutubeDL.error = None
        monkeypatch.setattr(ytdlp_captions.yt_dlp, "YoutubeDL", FakeYoutubeDL)
        return FakeYoutubeDL

    def test_success(self):
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, content=TIMEDTEXT_XML)

        outcome = make_source(handler).fetch("abc", "en")

        assert outcome.succeeded
        assert outcome.method == ExtractionMethod.YTDLP
        assert requested == [SRV1_EN]
        assert outcome.captions.language == "en"
        assert len(outcome.captions.subtitles) == 3
        assert [(o.code, o.name) for o in outcome.captions.available_languages] == [
            ("en", "English"),
            ("ko", "ko"),
            ("fr", "French (auto)"),
        ]

    def test_unknown_lang_uses_first_track(self):
        requested = []

        def handler(request):
            requested.append(request.url.params["lang"])
            return httpx.Response(200, content=TIMEDTEXT_XML)

        outcome = make_source(handler).fetch("abc", "es")

        assert outcome.succeeded
        assert requested == ["en"]

    def test_metadata_failure(self, fake_ytdl):
        fake_ytdl.error = yt_dlp.utils.DownloadError("ERROR: Private video")

        outcome = make_source(lambda request: httpx.Response(200)).fetch("abc")

        assert not outcome.succeeded
        assert outcome.error.startswith("yt-dlp extraction failed: metadata fetch failed")

    def test_no_tracks(self, fake_ytdl):
        fake_ytdl.info = {"subtitles": {}, "automatic_captions": {}}

        outcome = make_source(lambda request: httpx.Response(200)).fetch("abc")

        assert outcome.error == "yt-dlp extraction failed: no captions available"

    def test_download_status_error(self):
        outcome = make_source(lambda request: httpx.Response(404)).fetch("abc", "en")

        assert not outcome.succeeded
        assert "caption download failed" in outcome.error

    def test_download_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = make_source(handler).fetch("abc", "en")

        assert "caption download failed" in outcome.error

    def test_oversized_document(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=TIMEDTEXT_XML)))
        source = YtdlpCaptionSource(timeout=5, http_client=client, max_document_bytes=16)

        outcome = source.fetch("abc", "en")

        assert not outcome.succeeded
        assert "exceeds 16 bytes" in outcome.error

    def test_parse_failure(self):
        outcome = make_source(lambda request: httpx.Response(200, content=b"")).fetch("abc")

        assert "caption parse failed" in outcome.error


class FakeTranscriptApi:
    """youtube_transcript_api.YouTubeTranscriptApi 대체"""

    snippets = []
    error = None
    calls = []

    def __init__(self, http_client=None):
        self.http_client = http_client

    def fetch(self, video_id, languages=("en",)):
        FakeTranscriptApi.calls.append((video_id, list(languages), self.http_client))
        if self.error:
            raise self.error
        return iter(self.snippets)


class TestTranscriptApiSource:
    """TranscriptApiSource 테스트"""

    @pytest.fixture(autouse=True)
    def fake_api(self, monkeypatch):
        FakeTranscriptApi.snippets = [
            SimpleNamespace(text="Hello & welcome", start=0.0, duration=1.25),
            SimpleNamespace(text="second", start=1.25, duration=2),
        ]
        FakeTranscriptApi.error = None
        FakeTranscriptApi.calls = []
        monkeypatch.setattr(transcript_api, "YouTubeTranscriptApi", FakeTranscriptApi)
        return FakeTranscriptApi

    def test_success(self):
        outcome = TranscriptApiSource().fetch("abc", "ko")

        assert outcome.succeeded
        assert outcome.method == ExtractionMethod.TRANSCRIPT_API
        assert [(c.start, c.duration, c.text) for c in outcome.captions.subtitles] == [
            ("0.0", "1.3", "Hello & welcome"),
            ("1.3", "2.0", "second"),
        ]
        assert outcome.captions.available_languages is None

    def test_default_language_and_timeout_session(self, fake_api):
        TranscriptApiSource(default_language="ja", timeout=3).fetch("abc")

        video_id, languages, session = fake_api.calls[0]
        assert (video_id, languages) == ("abc", ["ja"])
        assert isinstance(session, TimeoutSession)
        assert session.timeout == 3

    def test_empty_transcript_is_success(self, fake_api):
        fake_api.snippets = []

        outcome = TranscriptApiSource().fetch("abc")

        assert outcome.succeeded
        assert outcome.captions.subtitles == []

    def test_network_error(self, fake_api):
        fake_api.error = requests.ConnectionError("boom")

        outcome = TranscriptApiSource().fetch("abc")

        assert not outcome.succeeded
        assert outcome.error == "youtube-transcript-api extraction failed: network error: boom"

    def test_library_internal_error(self, fake_api):
        fake_api.error = KeyError("captions")

        outcome = TranscriptApiSource().fetch("abc")

        assert not outcome.succeeded
        assert outcome.error.startswith("youtube-transcript-api extraction failed")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
