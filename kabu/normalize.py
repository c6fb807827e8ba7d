"""Text canonicalization used for registry matching."""

from __future__ import annotations

import re
import unicodedata

# U+FF01..U+FF5E are the full-width forms of ASCII "!".."~".
_FULLWIDTH_ASCII = {code: code - 0xFEE0 for code in range(0xFF01, 0xFF5F)}
_FULLWIDTH_SPACE = {0x3000: 0x20}
_WIDTH_TABLE = {**_FULLWIDTH_ASCII, **_FULLWIDTH_SPACE}

WHITESPACE_RE = re.compile(r"\s+")


def _fold(text: str) -> str:
    text = text.translate(_WIDTH_TABLE)
    return WHITESPACE_RE.sub("", text.lower())


def normalize(text: str) -> str:
    """Return the width/case/space-insensitive form of ``text``.

    Full-width alphanumerics, symbols and spaces become half-width, the
    result is lower-cased, stripped of every whitespace character and put in
    NFKC form. ``normalize(normalize(x)) == normalize(x)`` for any ``x``.
    """
    if not text:
        return ""
    folded = _fold(text)
    composed = unicodedata.normalize("NFKC", folded)
    if composed != folded:
        # compatibility forms such as "\u216b" (XII) decompose into capitals
        composed = unicodedata.normalize("NFKC", _fold(composed))
    return composed
