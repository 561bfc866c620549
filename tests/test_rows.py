import pytest

from aligner.models import Alignment, OutputRow, TranscriptLine, TranscriptToken
from aligner.rows import assemble_rows, format_time, line_span


def make_lines(*texts):
    lines = []
    index = 0
    for line_index, text in enumerate(texts):
        tokens = []
        offset = 0
        for word in text.split():
            offset = text.index(word, offset)
            tokens.append(TranscriptToken(text=word, char_offset=offset, line_index=line_index, index=index))
            offset += len(word)
            index += 1
        lines.append(TranscriptLine(text=text, tokens=tokens))
    return lines


def timed(start, end, exact=True, asr_index=0):
    return Alignment(start=start, end=end, exact=exact, asr_index=asr_index)


class TestAssembleRows:
    def test_gap_above_threshold_inserts_silence(self):
        lines = make_lines("one", "two")
        alignments = {0: timed(0.0, 1.0), 1: timed(1.2, 2.0)}
        rows = assemble_rows(lines, alignments)
        assert rows == [
            OutputRow(text="one", start_time=0.0, end_time=1.0),
            OutputRow(text="", start_time=1.0, end_time=1.0),
            OutputRow(text="two", start_time=1.2, end_time=2.0),
            OutputRow(text="", start_time=2.0, end_time=2.0),
        ]

    def test_gap_below_threshold_no_silence(self):
        lines = make_lines("one", "two")
        alignments = {0: timed(0.0, 1.0), 1: timed(1.1, 2.0)}
        rows = assemble_rows(lines, alignments)
        assert [r.text for r in rows] == ["one", "two", ""]

    def test_leading_silence_before_first_row(self):
        rows = assemble_rows(make_lines("late"), {0: timed(3.0, 4.0)})
        assert rows[0] == OutputRow(text="", start_time=0.0, end_time=0.0)
        assert rows[1].start_time == 3.0

    def test_row_window_is_min_start_max_end(self):
        lines = make_lines("a b c")
        alignments = {0: timed(0.1, 0.4), 1: timed(0.3, 0.9), 2: timed(0.5, 0.7)}
        rows = assemble_rows(lines, alignments)
        assert rows[0] == OutputRow(text="a b c", start_time=0.1, end_time=0.9)

    def test_partially_aligned_line_uses_aligned_words(self):
        lines = make_lines("a b c")
        rows = assemble_rows(lines, {1: timed(0.1, 0.5)})
        assert rows[0].start_time == 0.1
        assert rows[0].end_time == 0.5

    def test_times_rounded_to_precision(self):
        rows = assemble_rows(make_lines("x"), {0: timed(0.04, 1.26)})
        assert rows[0] == OutputRow(text="x", start_time=0.0, end_time=1.3)
        rows = assemble_rows(make_lines("x"), {0: timed(0.04, 1.26)}, precision=2)
        assert rows[0] == OutputRow(text="x", start_time=0.04, end_time=1.26)

    def test_halves_round_up(self):
        rows = assemble_rows(make_lines("x"), {0: timed(0.25, 1.25)})
        assert rows[0] == OutputRow(text="x", start_time=0.3, end_time=1.3)

    def test_unaligned_line_reuses_previous_end(self):
        lines = make_lines("one", "lost", "three")
        alignments = {0: timed(0.0, 1.0), 2: timed(1.05, 2.0)}
        rows = assemble_rows(lines, alignments)
        assert rows == [
            OutputRow(text="one", start_time=0.0, end_time=1.0),
            OutputRow(text="lost", start_time=1.0, end_time=1.0),
            OutputRow(text="three", start_time=1.1, end_time=2.0),
            OutputRow(text="", start_time=2.0, end_time=2.0),
        ]

    def test_unaligned_first_line_starts_at_zero(self):
        rows = assemble_rows(make_lines("lost"), {})
        assert rows == [
            OutputRow(text="lost", start_time=0.0, end_time=0.0),
            OutputRow(text="", start_time=0.0, end_time=0.0),
        ]

    def test_custom_gap_threshold(self):
        lines = make_lines("one", "two")
        alignments = {0: timed(0.0, 1.0), 1: timed(1.5, 2.0)}
        rows = assemble_rows(lines, alignments, gap_threshold=1.0)
        assert [r.text for r in rows] == ["one", "two", ""]

    def test_no_lines(self):
        assert assemble_rows([], {}) == [OutputRow(text="", start_time=0.0, end_time=0.0)]


class TestLineSpan:
    def test_span_with_asr_indices(self):
        lines = make_lines("a b")
        span = line_span(lines[0], {0: timed(0.5, 1.0, asr_index=4), 1: timed(1.0, 1.6, asr_index=6)})
        assert span.start == 0.5
        assert span.end == 1.6
        assert (span.first_asr_index, span.last_asr_index) == (4, 6)

    def test_no_aligned_tokens(self):
        assert line_span(make_lines("a b")[0], {}) is None


class TestFormatTime:
    @pytest.mark.parametrize(
        "seconds, precision, expected",
        [
            (2.5, 1, "2.5"),
            (0.00001, 1, "0.0"),
            (1234.56, 1, "1234.6"),
            (3.0, 2, "3.00"),
            (1e-20, 1, "0.0"),
            (0.25, 1, "0.3"),
            (1.25, 1, "1.3"),
        ],
    )
    def test_fixed_point(self, seconds, precision, expected):
        assert format_time(seconds, precision) == expected
