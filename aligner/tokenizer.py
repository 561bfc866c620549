"""Word-boundary segmenters used to split transcript lines and ASR text.

A segmenter takes a string and returns the word-like pieces it contains, in
order, each with the character offset where it starts. Punctuation and
whitespace never come back as tokens.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Callable, NamedTuple

from pythainlp.tokenize import word_tokenize

logger = logging.getLogger(__name__)

# pythainlp engines that work without optional extras.
THAI_ENGINES = ("newmm", "newmm-safe", "longest", "mm")


class Segment(NamedTuple):
    text: str
    offset: int


Segmenter = Callable[[str], list[Segment]]


def is_word_like(piece: str) -> bool:
    """True when the piece holds at least one letter or digit."""
    return any(ch.isalnum() for ch in piece)


def _is_edge_punctuation(ch: str) -> bool:
    return unicodedata.category(ch)[0] in ("P", "S")


def whitespace_segmenter(text: str) -> list[Segment]:
    """Split on whitespace and trim punctuation from both ends of each piece."""
    segments: list[Segment] = []
    for match in re.finditer(r"\S+", text):
        piece = match.group()
        lead = 0
        while lead < len(piece) and _is_edge_punctuation(piece[lead]):
            lead += 1
        trail = len(piece)
        while trail > lead and _is_edge_punctuation(piece[trail - 1]):
            trail -= 1
        word = piece[lead:trail]
        if word and is_word_like(word):
            segments.append(Segment(word, match.start() + lead))
    return segments


def thai_segmenter(text: str, engine: str = "newmm") -> list[Segment]:
    """Dictionary-based Thai word segmentation via pythainlp.

    pythainlp returns bare strings, so offsets are recovered by walking the
    source text. Pieces are emitted in source order, which keeps the walk
    linear.
    """
    segments: list[Segment] = []
    cursor = 0
    for piece in word_tokenize(text, engine=engine, keep_whitespace=True):
        found = text.find(piece, cursor)
        offset = found if found >= 0 else cursor
        cursor = offset + len(piece)
        if piece.strip() and is_word_like(piece):
            segments.append(Segment(piece, offset))
    return segments


def get_segmenter(language: str = "th", engine: str = "newmm") -> Segmenter:
    """Return the segmenter for a language code.

    Thai is unspaced and needs a dictionary segmenter; every other language
    falls back to whitespace splitting.
    """
    if language.lower().startswith("th"):
        if engine not in THAI_ENGINES:
            raise ValueError(
                f"Unknown Thai tokenizer engine {engine!r}; expected one of {', '.join(THAI_ENGINES)}"
            )
        logger.debug("Using pythainlp segmenter (engine=%s)", engine)
        return lambda text: thai_segmenter(text, engine=engine)
    logger.debug("Using whitespace segmenter for language %s", language)
    return whitespace_segmenter
