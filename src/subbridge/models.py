"""Data models for subbridge."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class SubtitleFormat(str, Enum):
    """The two supported line-based subtitle formats."""

    VTT = "vtt"  # HH:MM:SS.mmm, WEBVTT banner
    SRT = "srt"  # HH:MM:SS,mmm, no banner

    @property
    def other(self) -> "SubtitleFormat":
        return SubtitleFormat.SRT if self is SubtitleFormat.VTT else SubtitleFormat.VTT


class Cue(BaseModel):
    """A single subtitle entry with timing and text."""

    start: int = Field(ge=0)  # milliseconds
    end: int = Field(ge=0)  # milliseconds
    text: str

    @field_validator("text")
    @classmethod
    def _normalize_text(cls, value: str) -> str:
        # Subtitle lines are stored trimmed and a cue never holds a blank line
        return "\n".join(line.strip() for line in value.splitlines() if line.strip())

    @model_validator(mode="after")
    def _check_cue(self) -> "Cue":
        if self.end < self.start:
            raise ValueError(f"cue ends before it starts: {self.start} > {self.end}")
        if not self.text.strip():
            raise ValueError("cue text is empty")
        return self


class SubtitleDocument(BaseModel):
    """Ordered cues plus the format they were decoded from."""

    cues: list[Cue]
    format: SubtitleFormat = SubtitleFormat.VTT


class CacheEntry(BaseModel):
    """A complete translated document stored in the translation cache."""

    key: str
    value: str
    created_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.created_at >= ttl


class SubtitleDescriptor(BaseModel):
    """A candidate subtitle returned by a subtitle search provider."""

    id: str
    url: str
    lang: str
    score: float = 0.0
    title: str | None = None
    downloads: int = 0
    format: SubtitleFormat | None = None
