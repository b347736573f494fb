"""Subtitle translation through a language model, batch by batch."""

import concurrent.futures
import logging
from typing import Callable

from .cache import TranslationCache, make_key
from .clients import ModelClient
from .errors import BatchMismatchError, CacheUnavailable, ModelCallError, ParseError
from .languages import get_language_name
from .models import Cue
from .subtitles import decode, encode

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
SEPARATOR = "\n---\n"

TRANSLATION_PROMPT = """Translate the following subtitles from {source_lang} to {target_lang}.
Keep the same meaning and tone. Return ONLY the translations in order, separated by lines containing only ---, with no additional text:

{texts}"""


def batch_cues(cues: list[Cue], size: int = BATCH_SIZE) -> list[list[Cue]]:
    """Split cues into consecutive batches of at most ``size`` cues."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [cues[i:i + size] for i in range(0, len(cues), size)]


def build_prompt(texts: list[str], source_lang: str, target_lang: str) -> str:
    """Build the single request prompt for one batch of cue texts."""
    return TRANSLATION_PROMPT.format(
        source_lang=source_lang,
        target_lang=target_lang,
        texts=SEPARATOR.join(texts),
    )


def split_translation(response: str, expected: int) -> list[str]:
    """Split a model response into exactly ``expected`` translations.

    The response is split on the separator first. If the count does not
    match, non-blank lines are used instead when there are at least
    ``expected`` of them.

    Raises:
        BatchMismatchError: If neither split yields enough segments
    """
    segments = response.split(SEPARATOR)
    if len(segments) == expected:
        return segments

    lines = [line for line in response.split("\n") if line.strip()]
    if len(lines) >= expected:
        logger.debug(
            "Separator split gave %d segments, using first %d of %d lines",
            len(segments), expected, len(lines),
        )
        return lines[:expected]

    raise BatchMismatchError(expected, len(segments))


def _clean(translation: str, original: str) -> str:
    # Cue text never contains blank lines
    lines = [line.strip() for line in translation.strip().split("\n") if line.strip()]
    return "\n".join(lines) if lines else original


class SubtitleTranslator:
    """Translate WebVTT/SubRip documents with caching and graceful fallback.

    ``translate`` always returns usable subtitle text: batches the model
    cannot translate keep their original text, and any other failure returns
    the input unchanged.
    """

    def __init__(
        self,
        client: ModelClient,
        cache: TranslationCache | None = None,
        batch_size: int = BATCH_SIZE,
        max_workers: int = 4,
        timeout: float | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ):
        self.client = client
        self.cache = cache
        self.batch_size = batch_size
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self.on_progress = on_progress

    def translate(self, content: str | bytes, source_lang: str, target_lang: str) -> str:
        """Translate subtitle content from source_lang to target_lang.

        Args:
            content: Raw WebVTT or SubRip text
            source_lang: Source language code (e.g., en)
            target_lang: Target language code (e.g., el)

        Returns:
            The translated document in the input's format, or the input
            unchanged when it cannot be translated
        """
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")

        logger.info("Translating subtitle from %s to %s", source_lang, target_lang)
        try:
            key = make_key(content, source_lang, target_lang)
            cached = self._cache_get(key)
            if cached is not None:
                logger.info("Using cached translation")
                return cached
            return self._translate(content, key, source_lang, target_lang)
        except Exception:
            logger.exception("Error translating subtitle, returning original content")
            return content

    def _translate(self, content: str, key: str, source_lang: str, target_lang: str) -> str:
        try:
            document = decode(content)
        except ParseError:
            logger.error("No subtitle cues found")
            return content

        batches = batch_cues(document.cues, self.batch_size)
        logger.info(
            "Found %d subtitle cues, split into %d batches",
            len(document.cues), len(batches),
        )

        results = self._translate_batches(
            batches, get_language_name(source_lang), get_language_name(target_lang)
        )
        if all(result is None for result in results):
            logger.warning("No batch could be translated, returning original content")
            return content

        for batch, translations in zip(batches, results):
            if translations is None:
                continue
            for cue, translation in zip(batch, translations):
                cue.text = _clean(translation, cue.text)

        translated = encode(document)
        self._cache_put(key, translated)
        return translated

    def _translate_batches(
        self, batches: list[list[Cue]], source_name: str, target_name: str
    ) -> list[list[str] | None]:
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(batches))
        )
        try:
            futures = [
                executor.submit(
                    self._translate_batch, batch, index, len(batches), source_name, target_name
                )
                for index, batch in enumerate(batches, start=1)
            ]
            _, pending = concurrent.futures.wait(futures, timeout=self.timeout)
            if pending:
                raise TimeoutError(
                    f"{len(pending)} of {len(batches)} batches still running after {self.timeout}s"
                )
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _translate_batch(
        self,
        batch: list[Cue],
        index: int,
        total: int,
        source_name: str,
        target_name: str,
    ) -> list[str] | None:
        """Translate one batch; None means the batch keeps its original text."""
        if self.on_progress:
            self.on_progress(index, total)
        logger.debug("Translating batch %d/%d", index, total)

        texts = [cue.text for cue in batch]
        prompt = build_prompt(texts, source_name, target_name)
        try:
            response = self.client.generate(prompt)
            return split_translation(response, len(texts))
        except (ModelCallError, BatchMismatchError) as e:
            logger.warning("Batch %d/%d kept original text: %s", index, total, e)
        return None

    def _cache_get(self, key: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(key)
        except CacheUnavailable as e:
            logger.warning("Translation cache unavailable, treating as miss: %s", e)
            return None

    def _cache_put(self, key: str, value: str) -> None:
        if self.cache is None:
            return
        try:
            self.cache.put(key, value)
        except CacheUnavailable as e:
            logger.warning("Translation cache unavailable, result not cached: %s", e)


def translate_subtitle(
    content: str | bytes,
    source_lang: str,
    target_lang: str,
    client: ModelClient,
    cache: TranslationCache | None = None,
) -> str:
    """Translate subtitle content with a one-off translator."""
    return SubtitleTranslator(client, cache=cache).translate(content, source_lang, target_lang)
