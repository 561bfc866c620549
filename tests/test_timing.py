import pytest

from aligner.timing import expand_asr_segments
from aligner.tokenizer import whitespace_segmenter
from common.schemas import AsrSegment


def seg(start, end, text):
    return AsrSegment(start_time=start, end_time=end, text=text)


class TestExpandAsrSegments:
    def test_even_split_by_position(self):
        tokens = expand_asr_segments([seg(1.0, 2.0, "สวัสดี ครับ")], whitespace_segmenter)
        assert [t.text for t in tokens] == ["สวัสดี", "ครับ"]
        assert [(t.start, t.end) for t in tokens] == [(1.0, 1.5), (1.5, 2.0)]

    def test_sequence_index_is_global(self):
        tokens = expand_asr_segments(
            [seg(0.0, 1.0, "a b"), seg(1.0, 4.0, "c d e")], whitespace_segmenter
        )
        assert [t.sequence_index for t in tokens] == [0, 1, 2, 3, 4]
        assert tokens[2].start == 1.0
        assert tokens[3].start == pytest.approx(2.0)
        assert tokens[4].end == 4.0

    def test_wordless_segment_contributes_nothing(self):
        tokens = expand_asr_segments(
            [seg(0.0, 1.0, "..."), seg(1.0, 2.0, ""), seg(2.0, 3.0, "x")], whitespace_segmenter
        )
        assert len(tokens) == 1
        assert tokens[0].sequence_index == 0
        assert tokens[0].start == 2.0

    def test_zero_length_segment(self):
        tokens = expand_asr_segments([seg(1.0, 1.0, "a b")], whitespace_segmenter)
        assert all(t.start == 1.0 and t.end == 1.0 for t in tokens)

    def test_reversed_segment_does_not_raise(self):
        tokens = expand_asr_segments([seg(2.0, 1.0, "a b")], whitespace_segmenter)
        assert [(t.start, t.end) for t in tokens] == [(1.0, 1.5), (1.5, 2.0)]

    def test_starts_non_decreasing(self):
        tokens = expand_asr_segments(
            [seg(0.0, 0.9, "one two three"), seg(1.0, 1.3, "four"), seg(1.3, 3.0, "five six")],
            whitespace_segmenter,
        )
        starts = [t.start for t in tokens]
        assert starts == sorted(starts)
