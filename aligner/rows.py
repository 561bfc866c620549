from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from aligner.models import AlignmentMap, OutputRow, TranscriptLine

logger = logging.getLogger(__name__)

DEFAULT_GAP_THRESHOLD = 0.15


class LineSpan(NamedTuple):
    start: float
    end: float
    first_asr_index: int
    last_asr_index: int


def _quantize(seconds: float, precision: int) -> Decimal:
    # Decimal(float) is exact, so halves of the binary value round up.
    return Decimal(seconds).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def round_half_up(seconds: float, precision: int = 1) -> float:
    return float(_quantize(seconds, precision))


def format_time(seconds: float, precision: int = 1) -> str:
    """Fixed-point seconds, e.g. ``"12.3"``; never scientific notation."""
    return format(_quantize(seconds, precision), "f")


def line_span(line: TranscriptLine, alignments: AlignmentMap) -> Optional[LineSpan]:
    """Time window and ASR index range covered by a line's aligned tokens."""
    aligned = [alignments[t.index] for t in line.tokens if t.index in alignments]
    if not aligned:
        return None
    return LineSpan(
        start=min(a.start for a in aligned),
        end=max(a.end for a in aligned),
        first_asr_index=min(a.asr_index for a in aligned),
        last_asr_index=max(a.asr_index for a in aligned),
    )


def assemble_rows(
    lines: list[TranscriptLine],
    alignments: AlignmentMap,
    gap_threshold: float = DEFAULT_GAP_THRESHOLD,
    precision: int = 1,
) -> list[OutputRow]:
    """Build subtitle rows, inserting silence markers where the audio pauses.

    Row times are rounded to ``precision`` decimals before gaps are measured.
    A line with no aligned token inherits the previous row's end time for both
    bounds and does not move the running end time.
    """
    rows: list[OutputRow] = []
    last_end = 0.0
    for line in lines:
        span = line_span(line, alignments)
        if span is None:
            logger.debug("No aligned words in line, reusing %.3fs: %r", last_end, line.text)
            rows.append(OutputRow(text=line.text, start_time=last_end, end_time=last_end))
            continue

        start = round_half_up(span.start, precision)
        end = round_half_up(span.end, precision)
        if start - last_end > gap_threshold:
            rows.append(OutputRow(text="", start_time=last_end, end_time=last_end))
        rows.append(OutputRow(text=line.text, start_time=start, end_time=end))
        last_end = end

    rows.append(OutputRow(text="", start_time=last_end, end_time=last_end))
    return rows
