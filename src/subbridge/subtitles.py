"""WebVTT and SubRip parsing and generation."""

import logging
import re
from pathlib import Path
from typing import Iterable

from .errors import ParseError
from .models import Cue, SubtitleDocument, SubtitleFormat

logger = logging.getLogger(__name__)

_TIMESTAMP = r"(?:\d+:)?\d{2}:\d{2}[,.]\d{3}"

TIMESTAMP_RE = re.compile(r"(?:(\d+):)?(\d{2}):(\d{2})[,.](\d{3})")
TIMING_RE = re.compile(rf"^({_TIMESTAMP})\s*-->\s*({_TIMESTAMP})(?:\s+.*)?$")
SRT_TIMING_RE = re.compile(r"\d+:\d{2}:\d{2},\d{3}\s*-->\s*\d+:\d{2}:\d{2},\d{3}")
BANNER_RE = re.compile(r"^WEBVTT(?:[ \t].*)?$")
ANNOTATION_RE = re.compile(r"^(?:NOTE|STYLE|REGION)(?:[ \t].*)?$")

VTT_BANNER = "WEBVTT"


def parse_timestamp(timestamp: str) -> int:
    """Parse a WebVTT or SubRip timestamp to milliseconds.

    Args:
        timestamp: "HH:MM:SS.mmm", "HH:MM:SS,mmm" or the short WebVTT "MM:SS.mmm"

    Returns:
        Time in milliseconds
    """
    match = TIMESTAMP_RE.fullmatch(timestamp.strip())
    if not match:
        raise ValueError(f"Invalid timestamp format: {timestamp}")

    hours, minutes, seconds, millis = match.groups()
    return (
        int(hours or 0) * 3_600_000
        + int(minutes) * 60_000
        + int(seconds) * 1000
        + int(millis)
    )


def format_timestamp(millis: int, fmt: SubtitleFormat = SubtitleFormat.VTT) -> str:
    """Format milliseconds as "HH:MM:SS.mmm" (vtt) or "HH:MM:SS,mmm" (srt)."""
    hours, rest = divmod(millis, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, ms = divmod(rest, 1000)
    separator = "," if SubtitleFormat(fmt) is SubtitleFormat.SRT else "."
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{ms:03d}"


def _split_lines(text: str) -> list[str]:
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n").split("\n")


def detect_format(text: str) -> SubtitleFormat:
    """Classify subtitle text as WebVTT or SubRip.

    A leading WEBVTT banner means vtt; otherwise a SubRip timing line means
    srt. Anything else is treated as vtt.
    """
    for line in _split_lines(text):
        if line.strip():
            if BANNER_RE.match(line.strip()):
                return SubtitleFormat.VTT
            break

    if SRT_TIMING_RE.search(text):
        return SubtitleFormat.SRT
    return SubtitleFormat.VTT


def _is_identifier(line: str, lines: list[str], index: int, at_block_start: bool) -> bool:
    """A cue index or identifier is a line directly followed by a timing line."""
    if index + 1 >= len(lines):
        return False
    if not TIMING_RE.match(lines[index + 1].strip()):
        return False
    return line.isdigit() or at_block_start


def _make_cue(start: int, end: int, text_lines: list[str]) -> Cue | None:
    text = "\n".join(text_lines)
    if not text.strip():
        logger.debug("Dropping empty cue at %d ms", start)
        return None
    if end < start:
        logger.debug("Dropping cue with end before start (%d > %d)", start, end)
        return None
    return Cue(start=start, end=end, text=text)


def decode(text: str, format_hint: SubtitleFormat | str | None = None) -> SubtitleDocument:
    """Parse WebVTT or SubRip content into a SubtitleDocument.

    Both timestamp syntaxes are recognized whatever the format. The banner,
    NOTE/STYLE/REGION blocks and cue identifiers are skipped; every other line
    after a timing line belongs to that cue's text.

    Args:
        text: Raw subtitle content
        format_hint: Format to tag the document with (detected when omitted)

    Returns:
        SubtitleDocument with at least one cue

    Raises:
        ParseError: If no cue can be recovered
    """
    fmt = SubtitleFormat(format_hint) if format_hint else detect_format(text)
    lines = _split_lines(text)

    cues: list[Cue] = []
    current: tuple[int, int, list[str]] | None = None
    block_start = True
    skipping = False
    seen_content = False

    def flush() -> None:
        if current is not None:
            cue = _make_cue(*current)
            if cue is not None:
                cues.append(cue)

    for i, raw in enumerate(lines):
        line = raw.strip()
        if not line:
            block_start = True
            skipping = False
            continue

        at_block_start, block_start = block_start, False
        first_line, seen_content = not seen_content, True
        timing = TIMING_RE.match(line)

        if skipping and not timing:
            continue
        skipping = False

        if first_line and BANNER_RE.match(line):
            skipping = True
            continue

        if at_block_start and ANNOTATION_RE.match(line):
            flush()
            current = None
            skipping = True
            continue

        if timing:
            flush()
            start = parse_timestamp(timing.group(1))
            end = parse_timestamp(timing.group(2))
            current = (start, end, [])
            continue

        if _is_identifier(line, lines, i, at_block_start):
            continue

        if current is not None:
            current[2].append(line)

    flush()

    if not cues:
        raise ParseError("No subtitle cues found")

    return SubtitleDocument(cues=cues, format=fmt)


def _cue_block(index: int, cue: Cue, fmt: SubtitleFormat) -> str:
    start_ts = format_timestamp(cue.start, fmt)
    end_ts = format_timestamp(cue.end, fmt)
    return f"{index}\n{start_ts} --> {end_ts}\n{cue.text}\n\n"


def encode(
    subtitles: SubtitleDocument | Iterable[Cue],
    fmt: SubtitleFormat | str | None = None,
) -> str:
    """Convert cues to WebVTT or SubRip text.

    Args:
        subtitles: A SubtitleDocument or a sequence of cues
        fmt: Output format (defaults to the document's own format, else vtt)

    Returns:
        Subtitle text with sequential 1-based cue indices
    """
    if isinstance(subtitles, SubtitleDocument):
        cues = subtitles.cues
        fmt = fmt or subtitles.format
    else:
        cues = list(subtitles)
    fmt = SubtitleFormat(fmt or SubtitleFormat.VTT)

    header = f"{VTT_BANNER}\n\n" if fmt is SubtitleFormat.VTT else ""
    return header + "".join(
        _cue_block(index, cue, fmt) for index, cue in enumerate(cues, start=1)
    )


def format_from_path(path: str | Path) -> SubtitleFormat | None:
    """Return the format implied by a file name or URL extension."""
    suffix = Path(str(path).split("?", 1)[0]).suffix.lower()
    if suffix == ".vtt":
        return SubtitleFormat.VTT
    if suffix == ".srt":
        return SubtitleFormat.SRT
    return None


def read_subtitles(path: str | Path) -> SubtitleDocument:
    """Read and parse a subtitle file.

    Args:
        path: Path to a .vtt or .srt file

    Returns:
        Parsed SubtitleDocument
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    return decode(content, detect_format(content))


def write_subtitles(
    document: SubtitleDocument,
    path: str | Path,
    fmt: SubtitleFormat | str | None = None,
) -> None:
    """Write a document to disk, in its own format unless fmt is given."""
    path = Path(path)
    path.write_text(encode(document, fmt), encoding="utf-8")
