"""
Text helpers for ingredient matching and display.

Two independent transforms:
- normalize(): builds the key used for equality comparisons. Never shown to users.
- repair_for_display(): best-effort cleanup of mis-decoded text before rendering.
  Never used to decide whether two names match.
"""

import logging
import re
import unicodedata
from typing import Any

logger = logging.getLogger(__name__)

# Punctuation that survives normalization (everything else non-alphanumeric is dropped)
KEPT_PUNCTUATION = frozenset("-/&'().,")

_WHITESPACE_RUN = re.compile(r"\s+")
_SPACE_TAB_RUN = re.compile(r"[ \t]{2,}")

# Substrings that show up when UTF-8 bytes were decoded as a single-byte
# Western encoding (latin-1 / cp1252)
MOJIBAKE_MARKERS = ("Ã", "Â", "â€", "â\u0080", "ï¿½")

# Longest sequences first so double-encoded forms win over their fragments
MOJIBAKE_REPLACEMENTS = (
    # double-encoded (UTF-8 -> cp1252 -> UTF-8 -> cp1252)
    ("Ã¢â‚¬â„¢", "’"),
    ("Ã¢â‚¬Ëœ", "‘"),
    ("Ã¢â‚¬Å“", "“"),
    ("Ã¢â‚¬Â\u009d", "”"),
    ("Ã¢â‚¬Â¦", "…"),
    ("Ã¢â‚¬â€œ", "–"),
    ("Ã¢â‚¬â€\u009d", "—"),
    # double-encoded forms whose 0x9D byte was dropped by cp1252
    ("Ã¢â‚¬â€", "—"),
    ("Ã¢â‚¬Â", "”"),
    ("Ã¢â‚¬", "”"),
    # single-encoded, cp1252 view
    ("â€™", "’"),
    ("â€˜", "‘"),
    ("â€œ", "“"),
    ("â€\u009d", "”"),
    ("â€“", "–"),
    ("â€”", "—"),
    ("â€¦", "…"),
    # single-encoded, latin-1 view
    ("â\u0080\u0099", "’"),
    ("â\u0080\u0098", "‘"),
    ("â\u0080\u009c", "“"),
    ("â\u0080\u009d", "”"),
    ("â\u0080\u0093", "–"),
    ("â\u0080\u0094", "—"),
    ("â\u0080¦", "…"),
    # right double quote whose last byte (0x9D) was dropped by cp1252
    ("â€", "”"),
)

# Stray lead bytes left behind by mis-decoded non-breaking spaces
STRAY_MOJIBAKE = ("Ã‚", "Â")

REPLACEMENT_CHAR = "\ufffd"
_REPLACEMENT_DASH = re.compile("\ufffd+([\u2013\u2014-])|([\u2013\u2014-])\ufffd+")


def _is_kept_char(ch: str) -> bool:
    category = unicodedata.category(ch)
    return (
        category[0] in ("L", "N")
        or ch.isspace()
        or ch in KEPT_PUNCTUATION
    )


def normalize(text: Any) -> str:
    """
    Build the comparison key for an ingredient name.

    NFKC, lowercase, drop everything except letters, numbers, whitespace and
    a few punctuation marks, then collapse whitespace. Idempotent; returns ""
    for None or empty input.
    """
    if text is None:
        return ""
    s = unicodedata.normalize("NFKC", str(text)).lower()
    s = "".join(ch for ch in s if _is_kept_char(ch))
    return _WHITESPACE_RUN.sub(" ", s).strip()


def count_mojibake_markers(text: str) -> int:
    """Count occurrences of known mis-decoding artifacts in text."""
    return sum(text.count(marker) for marker in MOJIBAKE_MARKERS)


def _single_byte(ch: str) -> int:
    """Byte a character was most likely decoded from (cp1252, else its low byte)."""
    try:
        return ch.encode("cp1252")[0]
    except UnicodeEncodeError:
        return ord(ch) & 0xFF


def _redecode_low_bytes(text: str) -> str:
    """
    Reinterpret each character as a raw byte and decode the bytes as UTF-8.

    The result is kept only if it carries fewer artifacts than the input.
    """
    before = count_mojibake_markers(text)
    if before == 0:
        return text

    try:
        candidate = bytes(_single_byte(ch) for ch in text).decode("utf-8")
    except UnicodeDecodeError:
        return text

    if count_mojibake_markers(candidate) < before:
        logger.debug("Re-decoded mojibake text: %r -> %r", text, candidate)
        return candidate
    return text


def repair_for_display(text: Any) -> str:
    """
    Clean text corrupted by an encoding mismatch so it can be shown to a user.

    Heuristic and lossy; do not feed the result into matching.
    """
    if text is None:
        return ""
    s = str(text)

    s = s.replace("\r\n", "\n").replace("\r", "\n").replace("\u00a0", " ")

    s = _redecode_low_bytes(s)

    for broken, fixed in MOJIBAKE_REPLACEMENTS:
        s = s.replace(broken, fixed)
    for stray in STRAY_MOJIBAKE:
        s = s.replace(stray, "")

    # Keep the dash, lose the replacement char glued to it
    s = _REPLACEMENT_DASH.sub(lambda m: m.group(1) or m.group(2), s)
    s = s.replace(REPLACEMENT_CHAR, "")

    return _SPACE_TAB_RUN.sub(" ", s).strip()
