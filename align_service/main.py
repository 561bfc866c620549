from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, PlainTextResponse

from common.config import AlignerSettings
from common.schemas import (
    AlignRequest,
    AlignResponse,
    GroupOut,
    LineOut,
    RowOut,
    TokenAlignmentOut,
    TokenOut,
)
from aligner.engine import align
from aligner.models import AlignmentResult
from aligner.tokenizer import get_segmenter
from align_service.formats import rows_to_tsv
from align_service.report import render_report

logger = logging.getLogger(__name__)

settings = AlignerSettings()
app = FastAPI(title="Subtitle Aligner")


def _run(req: AlignRequest) -> AlignmentResult:
    language = req.language or settings.language
    engine = req.engine or settings.tokenizer_engine
    try:
        segmenter = get_segmenter(language, engine)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    run_settings = settings
    if req.include_trailing_group is not None:
        run_settings = settings.model_copy(update={"include_trailing_group": req.include_trailing_group})

    logger.info(
        "Aligning %d lines against %d ASR segments (language=%s)", len(req.lines), len(req.segments), language
    )
    return align(req.lines, req.segments, segmenter, run_settings)


def to_response(result: AlignmentResult) -> AlignResponse:
    lines = []
    for i, line in enumerate(result.lines):
        tokens = []
        for token in line.tokens:
            alignment = result.alignment_for(token)
            tokens.append(
                TokenOut(
                    text=token.text,
                    char_start=token.char_offset,
                    char_end=token.char_end,
                    alignment=TokenAlignmentOut(
                        start=alignment.start,
                        end=alignment.end,
                        exact=alignment.exact,
                        asr_index=alignment.asr_index,
                    ) if alignment else None,
                )
            )
        lines.append(LineOut(line_index=i, text=line.text, tokens=tokens))

    return AlignResponse(
        rows=[RowOut(start_time=r.start_time, end_time=r.end_time, text=r.text) for r in result.rows],
        groups=[
            GroupOut(
                matched=g.matched,
                transcript=[t.text for t in g.transcript_run],
                asr=[t.text for t in g.asr_run],
            )
            for g in result.groups
        ],
        lines=lines,
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/align", response_model=AlignResponse)
async def align_transcript(req: AlignRequest):
    return to_response(_run(req))


@app.post("/align/tsv", response_class=PlainTextResponse)
async def align_transcript_tsv(req: AlignRequest):
    result = _run(req)
    return PlainTextResponse(
        rows_to_tsv(result.rows, settings.time_precision),
        media_type="text/tab-separated-values",
    )


@app.post("/align/report", response_class=HTMLResponse)
async def align_transcript_report(req: AlignRequest):
    return HTMLResponse(render_report(_run(req)))


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port)
