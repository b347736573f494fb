"""Language code lookups."""

import re

LANGUAGE_NAMES = {
    "en": "English",
    "el": "Greek",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
    "nl": "Dutch",
    "sv": "Swedish",
    "pl": "Polish",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "hr": "Croatian",
    "sr": "Serbian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "th": "Thai",
    "id": "Indonesian",
    "ms": "Malay",
    "he": "Hebrew",
    "fa": "Persian",
}

# ISO 639-1 -> ISO 639-2
ISO639_2_CODES = {
    "en": "eng",
    "el": "ell",
    "fr": "fra",
    "es": "spa",
    "de": "deu",
    "it": "ita",
    "pt": "por",
    "ru": "rus",
    "ja": "jpn",
    "ko": "kor",
    "zh": "zho",
    "ar": "ara",
    "hi": "hin",
    "tr": "tur",
    "nl": "nld",
    "sv": "swe",
    "pl": "pol",
    "da": "dan",
    "fi": "fin",
    "no": "nor",
    "cs": "ces",
    "hu": "hun",
    "ro": "ron",
    "bg": "bul",
    "hr": "hrv",
    "sr": "srp",
    "sk": "slk",
    "sl": "slv",
    "uk": "ukr",
    "vi": "vie",
    "th": "tha",
    "id": "ind",
    "ms": "msa",
    "he": "heb",
    "fa": "fas",
}

IMDB_ID_RE = re.compile(r"^(tt)?(\d{7,})", re.IGNORECASE)


def get_language_name(code: str) -> str:
    """Get full language name from code, or the code itself if unknown."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def _to_iso1(value: str) -> str | None:
    lowered = value.lower()
    if len(lowered) == 2 and lowered in LANGUAGE_NAMES:
        return lowered
    if len(lowered) == 3:
        for iso1, iso2 in ISO639_2_CODES.items():
            if iso2 == lowered:
                return iso1
    for iso1, name in LANGUAGE_NAMES.items():
        if name.lower() == lowered:
            return iso1
    return None


def convert_language_code(value: str, target: str = "iso1") -> str:
    """Convert between ISO 639-1, ISO 639-2 and English language names.

    Args:
        value: A two-letter code, three-letter code or English name
        target: "iso1", "iso2" or "name"

    Returns:
        The converted value, or the input unchanged when it is not recognized
    """
    iso1 = _to_iso1(value)
    if iso1 is None:
        return value
    if target == "iso2":
        return ISO639_2_CODES[iso1]
    if target == "name":
        return LANGUAGE_NAMES[iso1]
    return iso1


def parse_imdb_id(value: str) -> str | None:
    """Normalize an IMDb id ("tt" followed by at least 7 digits)."""
    match = IMDB_ID_RE.match(value)
    if not match:
        return None
    return f"tt{match.group(2)}"
