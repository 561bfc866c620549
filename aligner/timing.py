from __future__ import annotations

import logging
from typing import Iterable

from common.schemas import AsrSegment
from aligner.models import AsrToken
from aligner.tokenizer import Segmenter

logger = logging.getLogger(__name__)


def expand_asr_segments(segments: Iterable[AsrSegment], segmenter: Segmenter) -> list[AsrToken]:
    """Split ASR segments into word tokens with apportioned timing.

    The recognizer only reports timing per segment, so each segment's span is
    divided in equal shares by token position. Segments that yield no words
    contribute nothing.
    """
    tokens: list[AsrToken] = []
    for seg in segments:
        words = segmenter(seg.text)
        if not words:
            continue

        start, end = seg.start_time, seg.end_time
        if end < start:
            logger.warning(
                "ASR segment ends before it starts (%.3f > %.3f); swapping bounds", start, end
            )
            start, end = end, start

        n = len(words)
        span = end - start
        for i, word in enumerate(words):
            tokens.append(
                AsrToken(
                    text=word.text,
                    start=start + (i / n) * span,
                    end=start + ((i + 1) / n) * span,
                    sequence_index=len(tokens),
                )
            )
    return tokens
