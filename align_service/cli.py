"""Batch entry point: align a transcript TSV against a Speechmatics result.

Writes ``aligned.tsv`` (start time + line text per subtitle, with empty rows
marking silences) and ``visualization.html`` into the output directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from common.config import AlignerSettings
from aligner.engine import align
from aligner.tokenizer import get_segmenter
from align_service.formats import InputError, load_asr_json, read_transcript_tsv, write_rows_tsv
from align_service.report import write_report

logger = logging.getLogger(__name__)


def build_parser(settings: AlignerSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="align-subtitles",
        description="Re-time transcript lines using ASR segment timing.",
    )
    parser.add_argument("--transcript", default=settings.transcript_path, help="Transcript TSV, one subtitle per row")
    parser.add_argument("--asr", default=settings.asr_path, help="Speechmatics JSON result")
    parser.add_argument("--output-dir", default=settings.output_dir, help="Directory for aligned.tsv and the report")
    parser.add_argument("--language", default=settings.language, help="Language code for word segmentation")
    parser.add_argument("--engine", default=settings.tokenizer_engine, help="pythainlp tokenizer engine")
    parser.add_argument(
        "--include-trailing-group",
        action="store_true",
        default=settings.include_trailing_group,
        help="Also align transcript words after the last exact match",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = AlignerSettings()
    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        lines = read_transcript_tsv(args.transcript)
        segments = load_asr_json(args.asr)
        segmenter = get_segmenter(args.language, args.engine)
    except (InputError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    run_settings = settings.model_copy(update={"include_trailing_group": args.include_trailing_group})
    result = align(lines, segments, segmenter, run_settings)

    output_dir = Path(args.output_dir)
    tsv_path = write_rows_tsv(result.rows, output_dir / "aligned.tsv", settings.time_precision)
    report_path = write_report(result, output_dir / "visualization.html")
    logger.info("Wrote %s and %s", tsv_path, report_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
