"""HTML report showing how each transcript line was aligned."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from aligner.models import AlignmentMap, AlignmentResult, TranscriptLine, TranscriptToken
from aligner.rows import line_span

TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def token_kind(token: TranscriptToken, alignments: AlignmentMap) -> str:
    alignment = alignments.get(token.index)
    if alignment is None:
        return "missing"
    return "exact" if alignment.exact else "approx"


def markup_line(line: TranscriptLine, alignments: AlignmentMap) -> Markup:
    """Escape the line and wrap each token in a span tagged with its kind."""
    parts: list[str] = []
    cursor = 0
    for token in sorted(line.tokens, key=lambda t: t.char_offset):
        if token.char_offset < cursor:
            continue
        parts.append(escape(line.text[cursor:token.char_offset]))
        parts.append(
            Markup('<span class="alignment" data-kind="{}">{}</span>').format(
                token_kind(token, alignments), line.text[token.char_offset:token.char_end]
            )
        )
        cursor = token.char_end
    parts.append(escape(line.text[cursor:]))
    return Markup("").join(parts)


def build_context(result: AlignmentResult) -> dict:
    groups = [
        {
            "matched": group.matched,
            "transcript": " ".join(t.text for t in group.transcript_run),
            "asr": " ".join(t.text for t in group.asr_run),
        }
        for group in result.groups
    ]

    lines = []
    for line in result.lines:
        span = line_span(line, result.alignments)
        entry = {
            "markup": markup_line(line, result.alignments),
            "start": None,
            "end": None,
            "asr_words": "",
        }
        if span is not None:
            used = result.asr_tokens[span.first_asr_index:span.last_asr_index + 1]
            entry.update(
                start=span.start,
                end=span.end,
                asr_words=" ".join(t.text for t in used),
            )
        lines.append(entry)

    return {"groups": groups, "lines": lines}


def render_report(result: AlignmentResult) -> str:
    template = _env.get_template("report.html")
    return template.render(**build_context(result))


def write_report(result: AlignmentResult, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_report(result), encoding="utf-8")
    return path
