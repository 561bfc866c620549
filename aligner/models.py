"""Internal models for transcript alignment."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TranscriptToken:
    text: str
    char_offset: int  # start of the token within its source line
    line_index: int
    index: int  # position in the flat transcript token sequence

    @property
    def char_end(self) -> int:
        return self.char_offset + len(self.text)


@dataclass(frozen=True)
class AsrToken:
    text: str
    start: float
    end: float
    sequence_index: int


@dataclass(frozen=True)
class Alignment:
    start: float
    end: float
    exact: bool
    asr_index: int  # sequence_index of the ASR token anchoring the start time


# Transcript token index -> alignment. Tokens absent from the map are unaligned.
AlignmentMap = dict[int, Alignment]


@dataclass(frozen=True)
class DiffGroup:
    matched: bool
    transcript_run: tuple[TranscriptToken, ...] = ()
    asr_run: tuple[AsrToken, ...] = ()


@dataclass
class TranscriptLine:
    text: str
    tokens: list[TranscriptToken] = field(default_factory=list)


@dataclass(frozen=True)
class OutputRow:
    text: str
    start_time: float
    end_time: float

    @property
    def is_silence(self) -> bool:
        return self.text == ""


@dataclass
class AlignmentResult:
    """Everything produced by one alignment run.

    Consumers (TSV writer, HTML report, HTTP service) read this object and
    never modify it.
    """

    lines: list[TranscriptLine]
    asr_tokens: list[AsrToken]
    groups: list[DiffGroup]
    alignments: AlignmentMap
    rows: list[OutputRow]

    @property
    def transcript_tokens(self) -> list[TranscriptToken]:
        return [token for line in self.lines for token in line.tokens]

    def alignment_for(self, token: TranscriptToken) -> Alignment | None:
        return self.alignments.get(token.index)
