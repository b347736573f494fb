"""Tests for subbridge.translate: batched translation with stubbed model."""

import threading

import pytest

from subbridge.cache import TranslationCache, make_key
from subbridge.clients import ModelClient
from subbridge.errors import BatchMismatchError, CacheUnavailable, ModelCallError
from subbridge.models import Cue
from subbridge.subtitles import decode, encode
from subbridge.translate import (
    SEPARATOR,
    SubtitleTranslator,
    batch_cues,
    build_prompt,
    split_translation,
    translate_subtitle,
)

EXAMPLE = "WEBVTT\n\n1\n00:00:01.000 --> 00:00:05.000\nHello"


# ── Helpers ─────────────────────────────────────────────────────────────────


class StubClient(ModelClient):
    """Model client answering prompts with a plain function."""

    model = "stub"

    def __init__(self, responder):
        self.responder = responder
        self.prompts: list[str] = []
        self._lock = threading.Lock()

    def generate(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
        return self.responder(prompt)


def prompt_texts(prompt: str) -> list[str]:
    return prompt.split("\n\n", 1)[1].split(SEPARATOR)


def upper(prompt: str) -> str:
    return SEPARATOR.join(text.upper() for text in prompt_texts(prompt))


def raise_model_error(prompt: str) -> str:
    raise ModelCallError("401 Unauthorized")


def make_document(count: int, fmt: str = "vtt") -> str:
    cues = [Cue(start=i * 1000, end=i * 1000 + 900, text=f"line {i}") for i in range(count)]
    return encode(cues, fmt)


class BrokenCache(TranslationCache):
    def get(self, key):
        raise CacheUnavailable("backend down")

    def put(self, key, value):
        raise CacheUnavailable("backend down")


# ── Pure helpers ────────────────────────────────────────────────────────────


def test_batch_cues_preserves_order():
    cues = decode(make_document(23)).cues
    batches = batch_cues(cues, 10)

    assert [len(b) for b in batches] == [10, 10, 3]
    assert [c for b in batches for c in b] == cues


def test_batch_cues_rejects_non_positive_size():
    with pytest.raises(ValueError):
        batch_cues([], 0)


def test_build_prompt_names_languages_and_joins_texts():
    prompt = build_prompt(["Hello", "Two\nlines"], "English", "Greek")

    assert "from English to Greek" in prompt
    assert prompt.endswith("Hello\n---\nTwo\nlines")


def test_split_translation_on_separator():
    assert split_translation("a\n---\nb\n---\nc", 3) == ["a", "b", "c"]


def test_split_translation_falls_back_to_lines():
    assert split_translation("a\nb\n\nc\nd", 3) == ["a", "b", "c"]


def test_split_translation_mismatch():
    with pytest.raises(BatchMismatchError) as excinfo:
        split_translation("a\nb", 3)
    assert excinfo.value.expected == 3


# ── Translator ──────────────────────────────────────────────────────────────


def test_example_translation():
    client = StubClient(lambda prompt: "Γεια")
    result = SubtitleTranslator(client).translate(EXAMPLE, "en", "el")

    assert result == "WEBVTT\n\n1\n00:00:01.000 --> 00:00:05.000\nΓεια\n\n"
    assert "from English to Greek" in client.prompts[0]


@pytest.mark.parametrize("responder", [raise_model_error, lambda p: 1 / 0])
def test_model_failure_returns_original(responder):
    cache = TranslationCache()
    result = SubtitleTranslator(StubClient(responder), cache=cache).translate(EXAMPLE, "en", "el")

    assert result == EXAMPLE
    assert len(cache) == 0


def test_order_and_timing_preserved_across_batches():
    content = make_document(25)
    client = StubClient(upper)
    result = SubtitleTranslator(client, batch_size=10).translate(content, "en", "fr")

    source, translated = decode(content).cues, decode(result).cues
    assert len(client.prompts) == 3
    assert len(translated) == len(source)
    assert [(c.start, c.end) for c in translated] == [(c.start, c.end) for c in source]
    assert [c.text for c in translated] == [f"LINE {i}" for i in range(25)]


def test_batch_local_fallback():
    def responder(prompt):
        if "line 10" in prompt_texts(prompt):
            return "not enough"
        return upper(prompt)

    content = make_document(30)
    result = SubtitleTranslator(StubClient(responder)).translate(content, "en", "de")

    texts = [c.text for c in decode(result).cues]
    assert texts[:10] == [f"LINE {i}" for i in range(10)]
    assert texts[10:20] == [f"line {i}" for i in range(10, 20)]
    assert texts[20:] == [f"LINE {i}" for i in range(20, 30)]


def test_model_error_in_one_batch_keeps_others_translated():
    def responder(prompt):
        if "line 0" in prompt_texts(prompt):
            raise ModelCallError("timeout")
        return upper(prompt)

    result = SubtitleTranslator(StubClient(responder)).translate(make_document(15), "en", "de")

    texts = [c.text for c in decode(result).cues]
    assert texts[:10] == [f"line {i}" for i in range(10)]
    assert texts[10:] == [f"LINE {i}" for i in range(10, 15)]


def test_newline_fallback_takes_first_segments():
    content = make_document(3)
    client = StubClient(lambda prompt: "uno\ndos\ntres\ncuatro")
    result = SubtitleTranslator(client).translate(content, "en", "es")

    assert [c.text for c in decode(result).cues] == ["uno", "dos", "tres"]


def test_empty_segment_keeps_original_text():
    content = make_document(2)
    client = StubClient(lambda prompt: "  \n---\nDEUX")
    result = SubtitleTranslator(client).translate(content, "en", "fr")

    assert [c.text for c in decode(result).cues] == ["line 0", "DEUX"]


def test_translated_blank_lines_are_collapsed():
    client = StubClient(lambda prompt: "Γεια\n\nσου")
    result = SubtitleTranslator(client).translate(EXAMPLE, "en", "el")

    assert [c.text for c in decode(result).cues] == ["Γεια\nσου"]


def test_srt_input_gives_srt_output():
    content = make_document(2, "srt")
    result = SubtitleTranslator(StubClient(upper)).translate(content, "en", "fr")

    assert result == (
        "1\n00:00:00,000 --> 00:00:00,900\nLINE 0\n\n"
        "2\n00:00:01,000 --> 00:00:01,900\nLINE 1\n\n"
    )


def test_cache_hit_avoids_second_model_call():
    client = StubClient(upper)
    cache = TranslationCache()
    translator = SubtitleTranslator(client, cache=cache)

    first = translator.translate(EXAMPLE, "en", "el")
    second = translator.translate(EXAMPLE, "en", "el")

    assert first == second
    assert len(client.prompts) == 1
    assert cache.get(make_key(EXAMPLE, "en", "el")) == first


def test_cache_is_keyed_by_language_pair():
    client = StubClient(upper)
    translator = SubtitleTranslator(client, cache=TranslationCache())

    translator.translate(EXAMPLE, "en", "el")
    translator.translate(EXAMPLE, "en", "fr")

    assert len(client.prompts) == 2


def test_partially_translated_document_is_cached():
    def responder(prompt):
        if "line 0" in prompt_texts(prompt):
            return "?"
        return upper(prompt)

    cache = TranslationCache()
    content = make_document(12)
    result = SubtitleTranslator(StubClient(responder), cache=cache).translate(content, "en", "it")

    assert cache.get(make_key(content, "en", "it")) == result


def test_unavailable_cache_is_a_miss():
    client = StubClient(upper)
    translator = SubtitleTranslator(client, cache=BrokenCache())

    assert "HELLO" in translator.translate(EXAMPLE, "en", "el")
    assert "HELLO" in translator.translate(EXAMPLE, "en", "el")
    assert len(client.prompts) == 2


@pytest.mark.parametrize("content", ["", "Hello", "\x00\xff\x13garbage-->", "WEBVTT\n\n"])
def test_malformed_input_is_returned_unchanged(content):
    client = StubClient(upper)
    cache = TranslationCache()

    assert SubtitleTranslator(client, cache=cache).translate(content, "en", "el") == content
    assert client.prompts == []
    assert len(cache) == 0


def test_bytes_input_returns_string():
    result = SubtitleTranslator(StubClient(upper)).translate(b"\xff\xfe\x00binary", "en", "el")
    assert isinstance(result, str)


def test_timeout_returns_original():
    release = threading.Event()

    def slow(prompt):
        release.wait(5)
        return upper(prompt)

    try:
        translator = SubtitleTranslator(StubClient(slow), timeout=0.05)
        assert translator.translate(EXAMPLE, "en", "el") == EXAMPLE
    finally:
        release.set()


def test_progress_callback_reports_every_batch():
    calls = []
    translator = SubtitleTranslator(
        StubClient(upper), max_workers=1, on_progress=lambda b, t: calls.append((b, t))
    )
    translator.translate(make_document(21), "en", "el")

    assert sorted(calls) == [(1, 3), (2, 3), (3, 3)]


def test_translate_subtitle_helper():
    assert "HELLO" in translate_subtitle(EXAMPLE, "en", "el", StubClient(upper))
