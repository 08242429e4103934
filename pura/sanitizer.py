"""Clean episode titles so they can be used as file names."""

import unicodedata

NON_BREAKING_SPACE = "\u00a0"
ZERO_WIDTH_SPACE = "\u200b"
ZERO_WIDTH_NON_JOINER = "\u200c"
ZERO_WIDTH_JOINER = "\u200d"
LEFT_TO_RIGHT_MARK = "\u200e"
RIGHT_TO_LEFT_MARK = "\u200f"
LEFT_TO_RIGHT_EMBEDDING = "\u202a"
RIGHT_TO_LEFT_EMBEDDING = "\u202b"
POP_DIRECTIONAL_FORMATTING = "\u202c"
LEFT_TO_RIGHT_OVERRIDE = "\u202d"
RIGHT_TO_LEFT_OVERRIDE = "\u202e"
ZERO_WIDTH_NO_BREAK_SPACE = "\ufeff"
EN_DASH = "\u2013"
EM_DASH = "\u2014"

RESTRICTED = frozenset(
    (
        NON_BREAKING_SPACE,
        ZERO_WIDTH_SPACE,
        LEFT_TO_RIGHT_MARK,
        RIGHT_TO_LEFT_MARK,
        LEFT_TO_RIGHT_EMBEDDING,
        RIGHT_TO_LEFT_EMBEDDING,
        POP_DIRECTIONAL_FORMATTING,
        LEFT_TO_RIGHT_OVERRIDE,
        RIGHT_TO_LEFT_OVERRIDE,
        ZERO_WIDTH_NO_BREAK_SPACE,
        ":",
        "<",
        ">",
        '"',
        "?",
        "*",
    )
)
RESTRICTED_DIVIDERS = frozenset(("/", "\\", "|", EN_DASH, EM_DASH))
DIVIDER_REPLACEMENT = "-"


def _is_control(char: str) -> bool:
    return unicodedata.category(char) == "Cc"


def sanitize(text: str) -> str:
    """Drop restricted and control characters and replace dividers with a hyphen."""
    return "".join(
        DIVIDER_REPLACEMENT if char in RESTRICTED_DIVIDERS else char
        for char in text
        if char not in RESTRICTED and not _is_control(char)
    )