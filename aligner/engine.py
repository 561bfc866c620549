"""Transcript-to-ASR alignment engine.

Pipeline: tokenize transcript lines, expand ASR segments into timed tokens,
diff the two token streams, partition the diff into matched/unmatched
groups, then project ASR timing onto every transcript token whose group has
any ASR tokens at all.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from common.config import AlignerSettings
from common.schemas import AsrSegment
from aligner.diff import MatchBlock, diff_sequences
from aligner.models import (
    Alignment,
    AlignmentMap,
    AlignmentResult,
    AsrToken,
    DiffGroup,
    TranscriptLine,
    TranscriptToken,
)
from aligner.rows import assemble_rows
from aligner.timing import expand_asr_segments
from aligner.tokenizer import Segmenter

logger = logging.getLogger(__name__)


def tokenize_transcript(lines: Iterable[str], segmenter: Segmenter) -> list[TranscriptLine]:
    """Split each non-blank line into tokens numbered across the whole transcript."""
    result: list[TranscriptLine] = []
    index = 0
    for text in lines:
        if not text or not text.strip():
            continue
        line = TranscriptLine(text=text)
        for segment in segmenter(text):
            line.tokens.append(
                TranscriptToken(
                    text=segment.text,
                    char_offset=segment.offset,
                    line_index=len(result),
                    index=index,
                )
            )
            index += 1
        result.append(line)
    return result


def build_groups(
    transcript: list[TranscriptToken],
    asr: list[AsrToken],
    blocks: list[MatchBlock],
    include_trailing: bool = False,
) -> list[DiffGroup]:
    """Interleave unmatched and matched groups from the diff's common runs.

    Every common run is preceded by the unmatched span since the previous
    run (possibly empty on either side). Tokens after the last common run
    only get a group when ``include_trailing`` is set. With no common run at
    all, both sequences form a single unmatched group.
    """
    groups: list[DiffGroup] = []
    last_t, last_a = 0, 0
    for length, t_start, a_start in blocks:
        groups.append(
            DiffGroup(
                matched=False,
                transcript_run=tuple(transcript[last_t:t_start]),
                asr_run=tuple(asr[last_a:a_start]),
            )
        )
        groups.append(
            DiffGroup(
                matched=True,
                transcript_run=tuple(transcript[t_start:t_start + length]),
                asr_run=tuple(asr[a_start:a_start + length]),
            )
        )
        last_t, last_a = t_start + length, a_start + length

    if (include_trailing or not blocks) and (last_t < len(transcript) or last_a < len(asr)):
        groups.append(
            DiffGroup(
                matched=False,
                transcript_run=tuple(transcript[last_t:]),
                asr_run=tuple(asr[last_a:]),
            )
        )
    return groups


def _resolve_time(asr_run: tuple[AsrToken, ...], t: float) -> tuple[float, int]:
    """Map a position ``t`` in ``[0, len(asr_run))`` onto the run's timeline.

    Each ASR token covers one unit of ``t``; the fractional part walks
    linearly through that token's interval.
    """
    idx = min(math.floor(t), len(asr_run) - 1)
    token = asr_run[idx]
    frac = t - idx
    return token.start + frac * (token.end - token.start), token.sequence_index


def interpolate_group(group: DiffGroup) -> AlignmentMap:
    """Estimate timing for each transcript token of one group.

    Each token's start is sampled at its proportional position in the ASR
    run; its duration is four times the time covered by the next quarter
    step, which follows the local token density rather than the group mean.
    """
    alignments: AlignmentMap = {}
    m = len(group.asr_run)
    k = len(group.transcript_run)
    if not m or not k:
        return alignments

    for i, token in enumerate(group.transcript_run):
        start, asr_index = _resolve_time(group.asr_run, i * m / k)
        quarter, _ = _resolve_time(group.asr_run, (i + 0.25) * m / k)
        duration = (quarter - start) * 4
        alignments[token.index] = Alignment(
            start=start,
            end=start + duration,
            exact=group.matched,
            asr_index=asr_index,
        )
    return alignments


def interpolate(groups: Iterable[DiffGroup]) -> AlignmentMap:
    alignments: AlignmentMap = {}
    for group in groups:
        alignments.update(interpolate_group(group))
    return alignments


def align(
    lines: Iterable[str],
    segments: Iterable[AsrSegment],
    segmenter: Segmenter,
    settings: Optional[AlignerSettings] = None,
) -> AlignmentResult:
    """Align transcript lines against ASR segments and build output rows."""
    settings = settings or AlignerSettings()

    transcript_lines = tokenize_transcript(lines, segmenter)
    transcript = [token for line in transcript_lines for token in line.tokens]
    asr = expand_asr_segments(segments, segmenter)
    logger.info("Words in transcript: %d", len(transcript))
    logger.info("Words in ASR: %d", len(asr))

    transcript_words = [token.text for token in transcript]
    asr_words = [token.text for token in asr]
    blocks = diff_sequences(transcript_words, asr_words)
    groups = build_groups(transcript, asr, blocks, include_trailing=settings.include_trailing_group)
    logger.info(
        "Diff produced %d common runs covering %d words", len(blocks), sum(b.common_length for b in blocks)
    )

    alignments = interpolate(groups)
    missing = len(transcript) - len(alignments)
    if missing:
        logger.info("%d transcript words left without timing", missing)

    rows = assemble_rows(
        transcript_lines,
        alignments,
        gap_threshold=settings.gap_threshold_s,
        precision=settings.time_precision,
    )
    return AlignmentResult(
        lines=transcript_lines,
        asr_tokens=asr,
        groups=groups,
        alignments=alignments,
        rows=rows,
    )
