from __future__ import annotations

import csv
import io
import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Iterator

from pydantic import ValidationError

from common.schemas import AsrSegment, SpeechmaticsTranscript
from aligner.models import OutputRow
from aligner.rows import format_time

logger = logging.getLogger(__name__)


class InputError(Exception):
    """Raised when an input file is missing or cannot be parsed."""


# A cell is only quoted when its closing quote also ends the cell.
_QUOTED_CELL = re.compile(r'"((?:[^"]|"")*)"(?=\t|\r?\n|\Z)')
_RAW_CELL = re.compile(r"[^\t\r\n]*")


def _iter_tsv_rows(text: str) -> Iterator[list[str]]:
    pos, end = 0, len(text)
    while pos < end:
        row: list[str] = []
        while True:
            match = _QUOTED_CELL.match(text, pos)
            if match:
                row.append(match.group(1).replace('""', '"'))
            else:
                match = _RAW_CELL.match(text, pos)
                row.append(match.group())
            pos = match.end()
            if pos < end and text[pos] == "\t":
                pos += 1
                continue
            break
        if text.startswith("\r\n", pos):
            pos += 2
        elif pos < end:
            pos += 1
        yield row


def parse_transcript_tsv(text: str) -> list[str]:
    """Return the first column of every row; cells may span several lines.

    Quotes are relaxed: a cell wrapped in quotes is unquoted (``""`` stands
    for one quote and newlines may appear inside), while quotes anywhere else
    are kept as written, so ``"Hi" she said`` survives untouched.
    """
    return [row[0] for row in _iter_tsv_rows(text) if row != [""]]


def read_transcript_tsv(path: str | Path) -> list[str]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Cannot read transcript {path}: {exc}") from exc
    lines = parse_transcript_tsv(text)
    logger.info("Loaded %d transcript rows from %s", len(lines), path)
    return lines


def parse_speechmatics(data: Any) -> list[AsrSegment]:
    """Convert a Speechmatics JSON transcript into plain ASR segments.

    Only the first alternative of each result is used. Results without
    alternatives or with empty content are dropped.
    """
    transcript = SpeechmaticsTranscript.model_validate(data)
    segments: list[AsrSegment] = []
    for result in transcript.results:
        if not result.alternatives:
            continue
        content = result.alternatives[0].content
        if not content:
            continue
        segments.append(
            AsrSegment(start_time=result.start_time, end_time=result.end_time, text=content)
        )
    return segments


def load_asr_json(path: str | Path) -> list[AsrSegment]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InputError(f"Cannot read ASR result {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InputError(f"ASR result {path} is not valid JSON: {exc}") from exc
    try:
        segments = parse_speechmatics(data)
    except ValidationError as exc:
        raise InputError(f"ASR result {path} has an unexpected shape: {exc}") from exc
    logger.info("Loaded %d ASR segments from %s", len(segments), path)
    return segments


def rows_to_tsv(rows: Iterable[OutputRow], precision: int = 1) -> str:
    """Two columns: start time in seconds and line text (empty for silence)."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter="\t", lineterminator="\n")
    for row in rows:
        writer.writerow([format_time(row.start_time, precision), row.text])
    return buf.getvalue()


def write_rows_tsv(rows: Iterable[OutputRow], path: str | Path, precision: int = 1) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(rows_to_tsv(rows, precision), encoding="utf-8")
    return path
