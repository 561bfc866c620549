from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


# --- ASR input ---

class AsrSegment(BaseModel):
    start_time: float
    end_time: float
    text: str


class SpeechmaticsAlternative(BaseModel):
    content: str = ""


class SpeechmaticsResult(BaseModel):
    start_time: float
    end_time: float
    alternatives: list[SpeechmaticsAlternative] = []


class SpeechmaticsTranscript(BaseModel):
    results: list[SpeechmaticsResult] = []


# --- Alignment request / response ---

class AlignRequest(BaseModel):
    lines: list[str]
    segments: list[AsrSegment]
    language: Optional[str] = None
    engine: Optional[str] = None
    include_trailing_group: Optional[bool] = None


class TokenAlignmentOut(BaseModel):
    start: float
    end: float
    exact: bool
    asr_index: int


class TokenOut(BaseModel):
    text: str
    char_start: int
    char_end: int
    alignment: Optional[TokenAlignmentOut] = None


class LineOut(BaseModel):
    line_index: int
    text: str
    tokens: list[TokenOut]


class GroupOut(BaseModel):
    matched: bool
    transcript: list[str]
    asr: list[str]


class RowOut(BaseModel):
    start_time: float
    end_time: float
    text: str


class AlignResponse(BaseModel):
    rows: list[RowOut]
    groups: list[GroupOut]
    lines: list[LineOut]
