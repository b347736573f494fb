"""Search, pick, download and translate subtitles for a title."""

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from .cache import TranslationCache
from .errors import CacheUnavailable
from .models import SubtitleDescriptor
from .search import OpenSubtitlesClient, find_best_subtitle
from .translate import SubtitleTranslator

logger = logging.getLogger(__name__)

_DESCRIPTORS = TypeAdapter(list[SubtitleDescriptor])


def _search_key(content_type: str, media_id: str) -> str:
    return f"subtitles-{content_type}-{media_id}"


def find_subtitles(
    search_client: OpenSubtitlesClient,
    content_type: str,
    media_id: str,
    cache: TranslationCache | None = None,
) -> list[SubtitleDescriptor]:
    """Search subtitles for a title, reusing cached results when present.

    Only non-empty result lists are cached so a transient failure is retried
    on the next call.
    """
    key = _search_key(content_type, media_id)
    if cache is not None:
        try:
            cached = cache.get(key)
        except CacheUnavailable as e:
            logger.warning("Search cache unavailable: %s", e)
            cached = None
        if cached is not None:
            try:
                return _DESCRIPTORS.validate_json(cached)
            except ValidationError as e:
                logger.warning("Discarding unreadable cached search for %s: %s", media_id, e)

    subtitles = search_client.search(content_type, media_id)
    if subtitles and cache is not None:
        try:
            cache.put(key, _DESCRIPTORS.dump_json(subtitles).decode("utf-8"))
        except CacheUnavailable as e:
            logger.warning("Search cache unavailable: %s", e)
    return subtitles


def translate_media(
    content_type: str,
    media_id: str,
    target_lang: str,
    translator: SubtitleTranslator,
    search_client: OpenSubtitlesClient,
    search_cache: TranslationCache | None = None,
    preferred_source: str = "en",
) -> str | None:
    """Produce a translated subtitle document for a movie or episode.

    Args:
        content_type: "movie", "series" or "anime"
        media_id: IMDb id, with ":season:episode" for episodes
        target_lang: Language code to translate into
        translator: Translator used for the chosen source subtitle
        search_client: OpenSubtitles client used to search and download
        search_cache: Optional cache of search results per title
        preferred_source: Source language tried first

    Returns:
        The translated document, or None when no source subtitle is available
    """
    subtitles = find_subtitles(search_client, content_type, media_id, search_cache)
    best = find_best_subtitle(subtitles, target_lang, preferred_source)
    if best is None:
        logger.info("No source subtitle to translate into %s for %s", target_lang, media_id)
        return None

    logger.info("Translating subtitle %s (%s) into %s", best.id, best.lang, target_lang)
    try:
        content = search_client.fetch(best)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error("Failed to download subtitle %s: %s", best.id, e)
        return None

    return translator.translate(content, best.lang or preferred_source, target_lang)
