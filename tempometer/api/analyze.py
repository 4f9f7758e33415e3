"""Upload endpoints for tempo analysis."""

import logging
import math
import os
import tempfile

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from tempometer.analysis.engine import TempoEngine
from tempometer.analysis.models import AnalysisResult, FileResult, TempoCurvePoint
from tempometer.api.schemas import (
    AnalysisResponse,
    BatchResponse,
    FileResultResponse,
    TempoCandidateResponse,
    TempoCurvePointResponse,
)
from tempometer.audio.loader import AudioDecodeError
from tempometer.audio.synth import DEMO_BPM, demo_buffer
from tempometer.config import clamp_window, settings
from tempometer.export import batch_results_csv, tempo_curve_csv

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aac", ".wma", ".webm"}


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _curve_response(curve: list[TempoCurvePoint]) -> list[TempoCurvePointResponse]:
    return [TempoCurvePointResponse(time=p.time, bpm=p.bpm, confidence=p.confidence) for p in curve]


def result_to_response(result: AnalysisResult, engine: TempoEngine, filename: str = "") -> AnalysisResponse:
    """Convert an AnalysisResult for JSON serialization (NaN BPM becomes null)."""
    estimate = result.estimate
    return AnalysisResponse(
        filename=filename,
        bpm=_finite_or_none(estimate.bpm),
        confidence=estimate.confidence,
        candidates=[
            TempoCandidateResponse(bpm=c.bpm, strength=c.strength)
            for c in estimate.candidates
        ],
        envelope=estimate.envelope.tolist(),
        autocorrelation=estimate.autocorrelation.tolist(),
        min_lag=estimate.min_lag,
        envelope_rate=estimate.envelope_rate,
        tempo_curve=_curve_response(result.tempo_curve),
        duration=result.duration,
        sample_rate=result.sample_rate,
        channels=result.n_channels,
        min_bpm=engine.config.min_bpm,
        max_bpm=engine.config.max_bpm,
    )


def _file_result_response(row: FileResult) -> FileResultResponse:
    return FileResultResponse(
        filename=row.filename,
        duration=row.duration,
        bpm=_finite_or_none(row.bpm),
        confidence=row.confidence,
        tempo_curve=_curve_response(row.curve),
    )


def _build_engine(
    min_bpm: float | None,
    max_bpm: float | None,
    per_window: bool,
    win_secs: float | None,
    hop_secs: float | None,
) -> TempoEngine:
    win, hop = clamp_window(win_secs or settings.win_secs, hop_secs or settings.hop_secs)
    return TempoEngine(
        config=settings.estimation_config(min_bpm, max_bpm),
        sample_rate=settings.sample_rate,
        per_window=per_window,
        win_secs=win,
        hop_secs=hop,
        window_workers=settings.window_workers,
    )


def _suffix(filename: str | None) -> str:
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[-1].lower()
    return ""


async def _read_upload(file: UploadFile) -> bytes:
    """Validate extension and size; return the file content."""
    ext = _suffix(file.filename)
    if ext and ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(400, f"Unsupported format. Use: {', '.join(sorted(ALLOWED_EXTENSIONS))}")

    content = await file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(400, f"File too large (max {settings.max_upload_mb} MB)")
    return content


def _write_temp(content: bytes, filename: str | None) -> str:
    # librosa needs a file path for some formats
    with tempfile.NamedTemporaryFile(suffix=_suffix(filename), delete=False) as tmp:
        tmp.write(content)
        return tmp.name


def _remove(path: str | None) -> None:
    if path:
        try:
            os.unlink(path)
        except OSError:
            pass


async def _analyze_upload(file: UploadFile, engine: TempoEngine) -> AnalysisResult:
    content = await _read_upload(file)
    tmp_path = None
    try:
        tmp_path = _write_temp(content, file.filename)
        return engine.analyze_file(tmp_path)
    except AudioDecodeError as e:
        logger.warning("Could not decode upload %s: %s", file.filename, e)
        raise HTTPException(400, "Could not decode audio")
    except Exception:
        logger.exception("Analysis of %s failed", file.filename)
        raise HTTPException(500, "Analysis failed")
    finally:
        _remove(tmp_path)


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_file(
    file: UploadFile = File(...),
    min_bpm: float | None = Query(None),
    max_bpm: float | None = Query(None),
    per_window: bool = Query(False),
    win_secs: float | None = Query(None),
    hop_secs: float | None = Query(None),
):
    """Estimate the tempo of an uploaded audio file."""
    engine = _build_engine(min_bpm, max_bpm, per_window, win_secs, hop_secs)
    result = await _analyze_upload(file, engine)
    return result_to_response(result, engine, filename=file.filename or "")


@router.post("/analyze/tempo-curve.csv")
async def analyze_tempo_curve_csv(
    file: UploadFile = File(...),
    min_bpm: float | None = Query(None),
    max_bpm: float | None = Query(None),
    win_secs: float | None = Query(None),
    hop_secs: float | None = Query(None),
):
    """Tempo-over-time curve of an uploaded file as CSV."""
    engine = _build_engine(min_bpm, max_bpm, True, win_secs, hop_secs)
    result = await _analyze_upload(file, engine)
    return Response(
        content=tempo_curve_csv(result.tempo_curve),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tempo_curve.csv"'},
    )


async def _analyze_uploads(files: list[UploadFile], engine: TempoEngine) -> list[FileResult]:
    if len(files) > settings.max_batch_files:
        raise HTTPException(400, f"Too many files (max {settings.max_batch_files})")

    contents = [await _read_upload(f) for f in files]
    tmp_paths: list[str] = []
    try:
        for f, content in zip(files, contents):
            tmp_paths.append(_write_temp(content, f.filename))
        names = [f.filename or f"file{i + 1}" for i, f in enumerate(files)]
        return engine.analyze_batch(tmp_paths, names=names)
    except Exception:
        logger.exception("Batch analysis failed")
        raise HTTPException(500, "Analysis failed")
    finally:
        for path in tmp_paths:
            _remove(path)


@router.post("/batch", response_model=BatchResponse)
async def analyze_batch(
    files: list[UploadFile] = File(...),
    min_bpm: float | None = Query(None),
    max_bpm: float | None = Query(None),
    per_window: bool = Query(False),
    win_secs: float | None = Query(None),
    hop_secs: float | None = Query(None),
):
    """Analyze several files; undecodable files are reported without a tempo."""
    engine = _build_engine(min_bpm, max_bpm, per_window, win_secs, hop_secs)
    rows = await _analyze_uploads(files, engine)
    failed = sum(1 for r in rows if r.duration == 0 and not r.is_valid)
    return BatchResponse(
        results=[_file_result_response(r) for r in rows],
        analyzed=len(rows) - failed,
        failed=failed,
    )


@router.post("/batch.csv")
async def analyze_batch_csv(
    files: list[UploadFile] = File(...),
    min_bpm: float | None = Query(None),
    max_bpm: float | None = Query(None),
):
    """Batch summary (filename, duration, bpm, confidence) as CSV."""
    engine = _build_engine(min_bpm, max_bpm, False, None, None)
    rows = await _analyze_uploads(files, engine)
    return Response(
        content=batch_results_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="bpm_results.csv"'},
    )


@router.get("/demo", response_model=AnalysisResponse)
async def analyze_demo(
    bpm: float = Query(DEMO_BPM, gt=0),
    per_window: bool = Query(False),
):
    """Analyze a synthetic click track."""
    engine = _build_engine(None, None, per_window, None, None)
    result = engine.analyze_buffer(demo_buffer(bpm=bpm))
    return result_to_response(result, engine, filename="demo")
