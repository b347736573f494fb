"""Tests for subbridge.service: search, download and translate for a title."""

import httpx

from subbridge.cache import TranslationCache
from subbridge.clients import ModelClient
from subbridge.search import OpenSubtitlesClient
from subbridge.service import find_subtitles, translate_media
from subbridge.translate import SEPARATOR, SubtitleTranslator

SRT = "1\n00:00:01,000 --> 00:00:02,000\nHello\n\n2\n00:00:03,000 --> 00:00:04,000\nBye\n"

PAYLOAD = {
    "data": [
        {"attributes": {"language": "fr", "ratings": 9, "votes": 1, "files": [{"file_id": 1}]}},
        {"attributes": {"language": "en", "ratings": 6, "votes": 2, "files": [{"file_id": 2}]}},
        {"attributes": {"language": "el", "ratings": 9, "votes": 1, "files": [{"file_id": 3}]}},
    ]
}


class UpperClient(ModelClient):
    model = "stub"

    def __init__(self):
        self.calls = 0

    def generate(self, prompt: str) -> str:
        self.calls += 1
        texts = prompt.split("\n\n", 1)[1].split(SEPARATOR)
        return SEPARATOR.join(text.upper() for text in texts)


class FakeOpenSubtitles:
    """Request handler recording which endpoints were hit."""

    def __init__(self, payload=PAYLOAD, download_status=200):
        self.payload = payload
        self.download_status = download_status
        self.requests: list[tuple[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if request.url.path.endswith("/subtitles"):
            return httpx.Response(200, json=self.payload)
        if request.url.path.endswith("/download"):
            if self.download_status != 200:
                return httpx.Response(self.download_status)
            return httpx.Response(200, json={"link": "https://dl.example.com/file.srt"})
        return httpx.Response(200, text=SRT)

    def count(self, suffix: str) -> int:
        return sum(1 for _, path in self.requests if path.endswith(suffix))


def _search_client(handler) -> OpenSubtitlesClient:
    return OpenSubtitlesClient("k", http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_translate_media_translates_preferred_source():
    handler = FakeOpenSubtitles()
    client = UpperClient()

    result = translate_media("movie", "tt0111161", "el", SubtitleTranslator(client), _search_client(handler))

    assert result == (
        "1\n00:00:01,000 --> 00:00:02,000\nHELLO\n\n"
        "2\n00:00:03,000 --> 00:00:04,000\nBYE\n\n"
    )
    assert client.calls == 1
    assert ("POST", "/api/v1/download") in handler.requests


def test_translate_media_without_source_returns_none():
    handler = FakeOpenSubtitles(payload={"data": PAYLOAD["data"][2:]})
    client = UpperClient()

    result = translate_media("movie", "tt0111161", "el", SubtitleTranslator(client), _search_client(handler))

    assert result is None
    assert client.calls == 0
    assert handler.count("/download") == 0


def test_translate_media_download_failure_returns_none():
    handler = FakeOpenSubtitles(download_status=502)
    client = UpperClient()

    result = translate_media("movie", "tt0111161", "el", SubtitleTranslator(client), _search_client(handler))

    assert result is None
    assert client.calls == 0


def test_translate_media_unsupported_id_returns_none():
    handler = FakeOpenSubtitles()

    result = translate_media("anime", "kitsu:1", "el", SubtitleTranslator(UpperClient()), _search_client(handler))

    assert result is None
    assert handler.requests == []


def test_search_results_are_cached_per_title():
    handler = FakeOpenSubtitles()
    search_client = _search_client(handler)
    cache = TranslationCache()

    first = find_subtitles(search_client, "movie", "tt0111161", cache)
    second = find_subtitles(search_client, "movie", "tt0111161", cache)
    find_subtitles(search_client, "series", "tt0111161:1:1", cache)

    assert first == second
    assert [sub.id for sub in second] == ["1", "2", "3"]
    assert handler.count("/subtitles") == 2


def test_empty_search_is_not_cached():
    handler = FakeOpenSubtitles(payload={"data": []})
    search_client = _search_client(handler)
    cache = TranslationCache()

    find_subtitles(search_client, "movie", "tt0111161", cache)
    find_subtitles(search_client, "movie", "tt0111161", cache)

    assert handler.count("/subtitles") == 2
    assert len(cache) == 0
