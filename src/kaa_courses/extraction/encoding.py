"""Decode HTML bytes served in UTF-8 or a legacy Traditional Chinese encoding."""

import logging

logger = logging.getLogger(__name__)

# Tried in order. cp950 and big5hkscs are supersets of Big5.
CANDIDATE_ENCODINGS = ("utf-8", "cp950", "big5hkscs")

# Detail pages always contain this character (from the credits label) when
# decoded correctly.
DETAIL_MARKER = "\u7e3d"


def decode_html(
    raw: bytes,
    marker: str | None = None,
    candidates: tuple[str, ...] = CANDIDATE_ENCODINGS,
) -> str:
    """Decode raw bytes using the first candidate that validates.

    A candidate validates when it decodes without errors and, if a marker
    is given, the text contains it. Without a validating candidate the first
    clean decode wins, and failing that the first candidate with
    replacement characters.
    """
    first_clean: str | None = None
    for encoding in candidates:
        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
        if marker is None or marker in text:
            if encoding != candidates[0]:
                logger.debug(f"Decoded page as {encoding}")
            return text
        if first_clean is None:
            first_clean = text

    if first_clean is not None:
        return first_clean
    return raw.decode(candidates[0], errors="replace")
