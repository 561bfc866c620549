"""Longest-common-subsequence diff over two token sequences.

Myers' O((N+M)D) algorithm in its linear-space form: run the forward and
reverse searches until they meet on an optimal edit path, split there, and
recurse on the boxes before and after the split.
Common prefixes and suffixes are peeled off first since they are frequent in
near-identical transcripts and cost nothing to match.
"""

from __future__ import annotations

from typing import Callable, NamedTuple, Optional, Sequence


class MatchBlock(NamedTuple):
    common_length: int
    transcript_start: int
    asr_start: int


IsCommon = Callable[[int, int], bool]


def diff_sequences(
    a: Sequence[str],
    b: Sequence[str],
    is_common: Optional[IsCommon] = None,
) -> list[MatchBlock]:
    """Return the maximal common runs of ``a`` and ``b`` in increasing order.

    ``is_common(i, j)`` decides whether ``a[i]`` and ``b[j]`` match; the
    default is exact string equality. Each block is ``(length, i, j)`` with
    ``a[i:i+length] == b[j:j+length]``. Blocks never touch each other.
    """
    if is_common is None:
        is_common = lambda i, j: a[i] == b[j]

    blocks: list[MatchBlock] = []
    _diff_box(0, len(a), 0, len(b), is_common, blocks)
    return _merge_adjacent(blocks)


def _diff_box(
    a_lo: int, a_hi: int, b_lo: int, b_hi: int, is_common: IsCommon, blocks: list[MatchBlock]
) -> None:
    start_a, start_b = a_lo, b_lo
    while a_lo < a_hi and b_lo < b_hi and is_common(a_lo, b_lo):
        a_lo += 1
        b_lo += 1
    if a_lo > start_a:
        blocks.append(MatchBlock(a_lo - start_a, start_a, start_b))

    suffix = 0
    while a_lo < a_hi - suffix and b_lo < b_hi - suffix and is_common(a_hi - suffix - 1, b_hi - suffix - 1):
        suffix += 1
    a_hi -= suffix
    b_hi -= suffix

    if a_lo < a_hi and b_lo < b_hi:
        split = _bisect(a_lo, a_hi, b_lo, b_hi, is_common)
        if split is not None:
            x, y = split
            _diff_box(a_lo, x, b_lo, y, is_common, blocks)
            _diff_box(x, a_hi, y, b_hi, is_common, blocks)

    if suffix:
        blocks.append(MatchBlock(suffix, a_hi, b_hi))


def _bisect(
    a_lo: int, a_hi: int, b_lo: int, b_hi: int, is_common: IsCommon
) -> Optional[tuple[int, int]]:
    """Find a point on an optimal edit path where the forward and reverse
    searches meet, and return it as absolute ``(x, y)``.

    The box must have no common prefix or suffix, so both sub-boxes around
    the returned point are strictly easier. Returns None when the two ranges
    share nothing at all.
    """
    n = a_hi - a_lo
    m = b_hi - b_lo
    max_d = (n + m + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d + 2
    # Furthest x reached on each diagonal k = x - y; the reverse search runs
    # the same recurrence on both sequences read backwards.
    v1 = [-1] * v_length
    v1[v_offset + 1] = 0
    v2 = list(v1)
    delta = n - m
    front = delta % 2 != 0
    # Diagonals that have run off the box are trimmed from later passes.
    k1start = k1end = k2start = k2end = 0

    for d in range(max_d):
        for k1 in range(-d + k1start, d + 1 - k1end, 2):
            k1_offset = v_offset + k1
            if k1 == -d or (k1 != d and v1[k1_offset - 1] < v1[k1_offset + 1]):
                x1 = v1[k1_offset + 1]
            else:
                x1 = v1[k1_offset - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and is_common(a_lo + x1, b_lo + y1):
                x1 += 1
                y1 += 1
            v1[k1_offset] = x1
            if x1 > n:
                k1end += 2
            elif y1 > m:
                k1start += 2
            elif front:
                k2_offset = v_offset + delta - k1
                if 0 <= k2_offset < v_length and v2[k2_offset] != -1:
                    if x1 >= n - v2[k2_offset]:
                        return a_lo + x1, b_lo + y1

        for k2 in range(-d + k2start, d + 1 - k2end, 2):
            k2_offset = v_offset + k2
            if k2 == -d or (k2 != d and v2[k2_offset - 1] < v2[k2_offset + 1]):
                x2 = v2[k2_offset + 1]
            else:
                x2 = v2[k2_offset - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and is_common(a_hi - x2 - 1, b_hi - y2 - 1):
                x2 += 1
                y2 += 1
            v2[k2_offset] = x2
            if x2 > n:
                k2end += 2
            elif y2 > m:
                k2start += 2
            elif not front:
                k1_offset = v_offset + delta - k2
                if 0 <= k1_offset < v_length and v1[k1_offset] != -1:
                    x1 = v1[k1_offset]
                    y1 = v_offset + x1 - k1_offset
                    if x1 >= n - x2:
                        return a_lo + x1, b_lo + y1

    return None


def _merge_adjacent(blocks: list[MatchBlock]) -> list[MatchBlock]:
    merged: list[MatchBlock] = []
    for block in blocks:
        if merged:
            prev = merged[-1]
            if (
                prev.transcript_start + prev.common_length == block.transcript_start
                and prev.asr_start + prev.common_length == block.asr_start
            ):
                merged[-1] = MatchBlock(
                    prev.common_length + block.common_length, prev.transcript_start, prev.asr_start
                )
                continue
        merged.append(block)
    return merged
