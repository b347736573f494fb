"""Conversion between WebVTT and SubRip."""

import logging
from pathlib import Path

from .errors import ParseError
from .models import SubtitleFormat
from .subtitles import decode, detect_format, encode, format_from_path

logger = logging.getLogger(__name__)


def convert(text: str, target: SubtitleFormat | str) -> str:
    """Convert subtitle text to the target format.

    Content already in the target format, and content with no recoverable
    cues, is returned unchanged.
    """
    target = SubtitleFormat(target)
    source = detect_format(text)
    if source is target:
        return text

    try:
        document = decode(text, source)
    except ParseError:
        logger.warning("Cannot convert %s subtitles to %s: no cues found", source.value, target.value)
        return text

    logger.debug("Converting %d cues from %s to %s", len(document.cues), source.value, target.value)
    return encode(document, target)


def to_other_format(text: str) -> str:
    """Convert WebVTT to SubRip or SubRip to WebVTT, whichever applies."""
    return convert(text, detect_format(text).other)


def srt_to_vtt(text: str) -> str:
    return convert(text, SubtitleFormat.VTT)


def vtt_to_srt(text: str) -> str:
    return convert(text, SubtitleFormat.SRT)


def convert_for_location(text: str, location: str | Path) -> str:
    """Convert content to match the extension of the URL or path serving it."""
    target = format_from_path(location)
    if target is None:
        return text
    return convert(text, target)
