"""Subtitle search on OpenSubtitles and choice of a translation source."""

import logging

import httpx

from .bridge import convert_for_location
from .languages import convert_language_code, parse_imdb_id
from .models import SubtitleDescriptor
from .subtitles import format_from_path

logger = logging.getLogger(__name__)

OPENSUBTITLES_API_URL = "https://api.opensubtitles.com/api/v1"
USER_AGENT = "subbridge v0.1.0"
REQUEST_TIMEOUT = 10.0
TRANSLATED_ID_MARKER = "_translate_"


class OpenSubtitlesClient:
    """Minimal OpenSubtitles REST client."""

    def __init__(
        self,
        api_key: str | None,
        http: httpx.Client | None = None,
        base_url: str = OPENSUBTITLES_API_URL,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.Client(timeout=REQUEST_TIMEOUT)

    def _headers(self) -> dict[str, str]:
        return {
            "Api-Key": self.api_key or "",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def search(self, content_type: str, media_id: str) -> list[SubtitleDescriptor]:
        """Search subtitles for a movie or episode.

        Args:
            content_type: "movie", "series" or "anime"
            media_id: IMDb id (Kitsu ids are not supported)

        Returns:
            Subtitle descriptors, empty on any failure
        """
        if not self.api_key:
            logger.warning("OpenSubtitles API key not configured")
            return []
        if "kitsu" in media_id:
            logger.info("Kitsu ids not supported for OpenSubtitles search")
            return []

        imdb_id = parse_imdb_id(media_id.split(":", 1)[0])
        if imdb_id is None:
            logger.info("Not an IMDb id: %s", media_id)
            return []

        try:
            response = self._http.get(
                f"{self.base_url}/subtitles",
                params={
                    "imdb_id": imdb_id[2:],
                    "type": "movie" if content_type == "movie" else "episode",
                },
                headers=self._headers(),
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("OpenSubtitles API error: %s", e)
            return []

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            logger.error("Unexpected OpenSubtitles response for %s", media_id)
            return []

        results = []
        for item in data:
            try:
                descriptor = self._to_descriptor(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed OpenSubtitles entry: %r", e)
                continue
            if descriptor is not None:
                results.append(descriptor)
        logger.info("Found %d subtitles for %s", len(results), media_id)
        return results

    def _to_descriptor(self, item: dict) -> SubtitleDescriptor | None:
        attributes = item.get("attributes") or {}
        files = attributes.get("files") or []
        if not files:
            return None

        ratings = float(attributes.get("ratings") or 0)
        votes = int(attributes.get("votes") or 0)
        file_name = files[0].get("file_name")
        return SubtitleDescriptor(
            id=str(files[0]["file_id"]),
            url=f"{self.base_url}/download",
            lang=convert_language_code(attributes.get("language") or ""),
            title=attributes.get("release"),
            downloads=attributes.get("download_count") or 0,
            # Average rating per vote
            score=ratings / votes if ratings > 0 and votes > 0 else 0.0,
            format=format_from_path(file_name) if file_name else None,
        )

    def fetch(self, subtitle: SubtitleDescriptor) -> str:
        """Get the content of a search result.

        Results pointing at the OpenSubtitles download endpoint go through
        ``download``; any other URL is fetched directly.
        """
        if subtitle.url == f"{self.base_url}/download":
            return self.download(subtitle.id)
        return fetch_subtitle_content(subtitle.url, self._http)

    def download(self, file_id: str) -> str:
        """Download the content of a subtitle file.

        Raises:
            httpx.HTTPError: If the download link or the file cannot be fetched
        """
        response = self._http.post(
            f"{self.base_url}/download",
            json={"file_id": int(file_id) if file_id.isdigit() else file_id},
            headers=self._headers(),
        )
        response.raise_for_status()
        link = response.json()["link"]

        subtitle = self._http.get(link)
        subtitle.raise_for_status()
        return subtitle.text


def find_best_subtitle(
    subtitles: list[SubtitleDescriptor],
    target_lang: str,
    preferred_source: str = "en",
) -> SubtitleDescriptor | None:
    """Pick the subtitle to translate into target_lang.

    Subtitles already in the target language and our own translations are
    skipped. The preferred source language wins, then the highest score.
    """
    candidates = [
        sub for sub in subtitles
        if sub.lang != target_lang and TRANSLATED_ID_MARKER not in sub.id
    ]
    if not candidates:
        return None

    preferred = [sub for sub in candidates if sub.lang == preferred_source]
    pool = preferred or candidates
    return max(pool, key=lambda sub: sub.score)


def fetch_subtitle_content(url: str, http: httpx.Client) -> str:
    """Fetch subtitle text, converted to the format its URL extension names."""
    logger.info("Fetching subtitle content from %s", url)
    response = http.get(
        url,
        headers={"Accept": "text/plain, text/vtt, */*", "User-Agent": USER_AGENT},
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return convert_for_location(response.text, url)
