"""Language code conversion utilities."""

from typing import Optional

# ISO 639-1 (2-letter) to ISO 639-2/B (3-letter) mapping
# Matroska stores ISO 639-2/B codes, users often type ISO 639-1
ISO_639_1_TO_639_2 = {
    "en": "eng",  # English
    "es": "spa",  # Spanish
    "fr": "fre",  # French
    "de": "ger",  # German
    "it": "ita",  # Italian
    "pt": "por",  # Portuguese
    "ru": "rus",  # Russian
    "ja": "jpn",  # Japanese
    "ko": "kor",  # Korean
    "zh": "chi",  # Chinese
    "ar": "ara",  # Arabic
    "hi": "hin",  # Hindi
    "nl": "dut",  # Dutch
    "pl": "pol",  # Polish
    "tr": "tur",  # Turkish
    "sv": "swe",  # Swedish
    "da": "dan",  # Danish
    "no": "nor",  # Norwegian
    "fi": "fin",  # Finnish
    "cs": "cze",  # Czech
    "hu": "hun",  # Hungarian
    "ro": "rum",  # Romanian
    "th": "tha",  # Thai
    "vi": "vie",  # Vietnamese
    "id": "ind",  # Indonesian
    "he": "heb",  # Hebrew
    "el": "gre",  # Greek
    "uk": "ukr",  # Ukrainian
    "ca": "cat",  # Catalan
    "sk": "slo",  # Slovak
    "hr": "hrv",  # Croatian
    "sr": "srp",  # Serbian
    "bg": "bul",  # Bulgarian
    "lt": "lit",  # Lithuanian
    "lv": "lav",  # Latvian
    "et": "est",  # Estonian
    "sl": "slv",  # Slovenian
    "fa": "per",  # Persian
    "ms": "may",  # Malay
    "ta": "tam",  # Tamil
    "te": "tel",  # Telugu
    "bn": "ben",  # Bengali
    "mr": "mar",  # Marathi
}


def _build_reverse_index(mapping: dict[str, str]) -> dict[str, str]:
    """Build the 3-letter to 2-letter index.

    When two 2-letter codes map to the same 3-letter code, the first one in
    insertion order wins.
    """
    reverse: dict[str, str] = {}
    for two_letter, three_letter in mapping.items():
        reverse.setdefault(three_letter, two_letter)
    return reverse


ISO_639_2_TO_639_1 = _build_reverse_index(ISO_639_1_TO_639_2)

# ISO 639-2/B (3-letter) code to English language name
LANGUAGE_NAMES = {
    "eng": "English",
    "spa": "Spanish",
    "fre": "French",
    "ger": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "rus": "Russian",
    "jpn": "Japanese",
    "kor": "Korean",
    "chi": "Chinese",
    "ara": "Arabic",
    "hin": "Hindi",
    "dut": "Dutch",
    "pol": "Polish",
    "tur": "Turkish",
    "swe": "Swedish",
    "dan": "Danish",
    "nor": "Norwegian",
    "fin": "Finnish",
    "cze": "Czech",
    "hun": "Hungarian",
    "rum": "Romanian",
    "tha": "Thai",
    "vie": "Vietnamese",
    "ind": "Indonesian",
    "heb": "Hebrew",
    "gre": "Greek",
    "ukr": "Ukrainian",
    "cat": "Catalan",
    "slo": "Slovak",
    "hrv": "Croatian",
    "srp": "Serbian",
    "bul": "Bulgarian",
    "lit": "Lithuanian",
    "lav": "Latvian",
    "est": "Estonian",
    "slv": "Slovenian",
    "per": "Persian",
    "may": "Malay",
    "tam": "Tamil",
    "tel": "Telugu",
    "ben": "Bengali",
    "mar": "Marathi",
}


def to_three_letter(code: str) -> Optional[str]:
    """Convert ISO 639-1 (2-letter) code to ISO 639-2/B (3-letter).

    Args:
        code: 2-letter language code (e.g., 'en')

    Returns:
        3-letter language code (e.g., 'eng'), or None if unknown
    """
    if not code:
        return None
    return ISO_639_1_TO_639_2.get(code.lower())


def to_two_letter(code: str) -> Optional[str]:
    """Convert ISO 639-2/B (3-letter) code to ISO 639-1 (2-letter).

    Args:
        code: 3-letter language code (e.g., 'eng')

    Returns:
        2-letter language code (e.g., 'en'), or None if unknown
    """
    if not code:
        return None
    return ISO_639_2_TO_639_1.get(code.lower())


def display_name(code: str) -> str:
    """Get a human-readable name for a language code.

    Accepts both 2-letter and 3-letter codes. Never fails: unknown codes
    are returned unchanged.

    Args:
        code: Language code (e.g., 'en', 'eng')

    Returns:
        Language name (e.g., 'English'), or the code itself if unknown
    """
    if not code:
        return code

    three_letter = to_three_letter(code) if len(code) == 2 else code.lower()
    return LANGUAGE_NAMES.get(three_letter, code)


def is_known_language(code: str) -> bool:
    """Check whether a token is a known 2-letter or 3-letter language code."""
    if len(code) == 2:
        return code.lower() in ISO_639_1_TO_639_2
    if len(code) == 3:
        return code.lower() in ISO_639_2_TO_639_1
    return False


def language_matches(track_language: str, filter_token: str) -> bool:
    """Check if a track language matches a language filter token.

    Matching is case-insensitive and bridges 2-letter and 3-letter codes,
    so 'en' matches a track tagged 'eng' and 'eng' matches a track tagged 'en'.

    Args:
        track_language: Language code stored in the container
        filter_token: Language code given by the user

    Returns:
        True if the track language satisfies the filter token
    """
    if not filter_token:
        return True

    track_language = (track_language or "").lower()
    token = filter_token.lower()

    if track_language == token:
        return True

    if len(token) == 2:
        mapped = ISO_639_1_TO_639_2.get(token)
        return mapped is not None and track_language == mapped

    if len(token) == 3:
        mapped = ISO_639_2_TO_639_1.get(token)
        return mapped is not None and track_language == mapped

    return False
